"""
Notes2Quote — Job Quote & Invoice Builder

Packages:
    core/   Pricing model, editing session, SQLite store, settings, paths
    forms/  Document model, PDF rendering, photo loading, export
    api/    Flask routes, HTML templates and the screen renderer
"""
