"""Pydantic models for session request payloads."""

from pydantic import AliasChoices, BaseModel, Field

from gift_exchange.domain.models import Group, Participant


class HousePayload(BaseModel):
    """A household as sent by the setup screen."""

    id: str
    name: str = ""

    def to_domain(self) -> Group:
        return Group(id=self.id, name=self.name)


class PersonPayload(BaseModel):
    """A person as sent by the setup screen."""

    id: str
    name: str = ""
    house_id: str = Field(
        validation_alias=AliasChoices("houseId", "groupId", "house_id", "group_id")
    )

    def to_domain(self) -> Participant:
        return Participant(id=self.id, name=self.name, group_id=self.house_id)


class RosterRequest(BaseModel):
    """Houses and people for a new session or a one-off draw."""

    houses: list[HousePayload] = Field(
        validation_alias=AliasChoices("houses", "groups")
    )
    people: list[PersonPayload] = Field(
        validation_alias=AliasChoices("people", "participants")
    )

    def groups(self) -> list[Group]:
        return [house.to_domain() for house in self.houses]

    def participants(self) -> list[Participant]:
        return [person.to_domain() for person in self.people]


class ClaimRequest(BaseModel):
    """Claim payload; the person id is checked by the endpoint."""

    person_id: str | None = Field(
        default=None, validation_alias=AliasChoices("personId", "participantId")
    )
