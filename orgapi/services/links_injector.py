"""
Hypermedia links for organization representations.
"""

from orgapi.context import ServiceContext

SERVICE_PATH = "/organization"


def _link(rel: str, href: str, method: str = "GET") -> dict:
    return {"rel": rel, "href": href, "method": method}


class OrganizationLinksInjector:
    """
    Decorates organization representations with navigation links.

    Produces ``self``, ``suborganizations`` and ``members`` links for
    every organization and a ``parent`` link for sub-organizations.
    The input dict is left untouched; a decorated copy is returned.
    """

    def inject_links(self, organization: dict, context: ServiceContext) -> dict:
        service_url = context.base_url + SERVICE_PATH
        organization_id = organization["id"]

        resource_url = f"{service_url}/{organization_id}"
        links = [
            _link("self", resource_url),
            _link("suborganizations", f"{resource_url}/organizations"),
            _link("members", f"{resource_url}/members"),
        ]
        if organization.get("parent"):
            links.append(_link("parent", f"{service_url}/{organization['parent']}"))

        return {**organization, "links": links}
