"""docnav - Resource ID resolution and navigation models for versioned docs.

This package provides tools for:
- Parsing resource ID specs (version@component:module:family$relative)
- Looking up pages, partials, images and aliases in a content catalog
- Converting xrefs, image targets and includes into link targets
- Building breadcrumbs, previous/next links and version lists for a page

Usage:
    python -m docnav resolve the-page.adoc --from 2.0@comp::index.adoc
    python -m docnav model 2.0@comp::the-page.adoc
    python -m docnav check
"""

__version__ = "1.0.0"
