"""
Service layer package.

Each service module encapsulates one piece of the organization API.
Services are the only layer that interacts with models; routes never
access the database directly.

    organization_manager    -> persistence of organizations and members
    organization_validator  -> structural checks on submitted bodies
    links_injector          -> hypermedia links on returned resources
    organization_service    -> request dispatcher wiring the three above
    audit_service           -> audit trail of changes
"""
