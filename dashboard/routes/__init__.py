"""Flask blueprint package for the dashboard routes.

Blueprints are defined in the sibling modules (e.g., ``invoice_routes``) and
registered in :mod:`dashboard.__init__`. Every view answers with JSON; page
rendering happens in the browser.
"""
