"""
Formwork Components — the shipped catalogue.

layout/    wrapper templates for every template slot fallback
elements/  controls used by submit zones
"""
