"""Review Cycle package.

Feature modules (windows, permissions, compliance, dashboard, ...) follow the
same layering: dataclass models, Protocol repositories, MySQL repositories,
services holding the rules and a thin Flask controller per feature.
"""
