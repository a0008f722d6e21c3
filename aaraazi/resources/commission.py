"""
Commission agents.

External brokers are contacts; the backend has no dedicated endpoint yet, so
they are read from the contacts list.
"""

from aaraazi.resources.base import ApiModel
from aaraazi.resources.contacts import ContactsResource

EXTERNAL_BROKER_LIMIT = 500


class AgentOption(ApiModel):
    id: str
    name: str = ""
    email: str | None = None
    phone: str | None = None


class CommissionResource:
    def __init__(self, contacts: ContactsResource):
        self.contacts = contacts

    async def get_external_brokers(self) -> list[AgentOption]:
        page = await self.contacts.find_all({"limit": EXTERNAL_BROKER_LIMIT})
        return [
            AgentOption(
                id=contact.id,
                name=contact.name,
                email=contact.email,
                phone=contact.phone or None,
            )
            for contact in page.items
        ]
