"""Bundled plugins.

A plugin is a callable taking the :class:`~tabby.core.site.Site`; enable one
with ``site.use(plugin)``. Each module exposes a factory returning the
plugin, so options are passed at creation time::

    site.use(jinja2()).use(markdown()).use(sitemap())

"""
