"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold the SSO rules that don't belong to a single
    entity: identity normalization, organization policy, account linking.
    """

    pass
