"""Typed models for site identity and association documents.

- ``Link``: A relation link carried on API documents
- ``SiteIdentity``: The identity document a site exposes about itself
- ``AssociationMember``: One paired site inside an association document
- ``AssociationDocument``: The collection of sites paired with a site

Design notes:
- All models are frozen dataclasses; a mutation produces a new value.
- ``source`` keeps the serialized XML element a model was decoded from,
  so a member that is not touched is re-submitted byte for byte.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from site_pairing.core.constants import EDIT_LINK_REL
from site_pairing.core.exceptions import ValidationError

# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ModelValidationError(ValueError, ValidationError):
    """Raised when a domain model is constructed with invalid field values.

    Attributes:
        model: Name of the model class that failed validation.
        field_name: The field that violated the invariant.
        value: The invalid value.
    """

    default_stage = "model_validation"
    default_code = "MODEL_VALIDATION_FAILED"

    def __init__(self, model: str, field_name: str, value: object, message: str) -> None:
        self.model = model
        self.field_name = field_name
        self.value = value
        formatted = f"{model}.{field_name}={value!r}: {message}"
        ValidationError.__init__(self, formatted)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Link:
    """A ``<Link>`` element: relation, media type and target URI."""

    rel: str
    media_type: str
    href: str


@dataclass(frozen=True, slots=True)
class SiteIdentity:
    """Identity of one installation, as published in its local association data.

    Attributes:
        site_id: Globally unique site URN (``urn:vcloud:site:<uuid>``).
        site_name: Display name; empty when the site was never named.
        rest_endpoint: Base URI of the site's REST API.
        links: Relation links; ``edit`` points at the rename endpoint.
        source: Serialized XML element this identity was decoded from.
    """

    site_id: str
    site_name: str = ""
    rest_endpoint: str = ""
    links: tuple[Link, ...] = ()
    source: bytes = field(default=b"", repr=False)

    def __post_init__(self) -> None:
        if not self.site_id:
            raise ModelValidationError(type(self).__name__, "site_id", self.site_id, "must not be empty")

    @property
    def has_name(self) -> bool:
        """Whether a non-blank site name is set."""
        return bool(self.site_name.strip())

    def link(self, rel: str) -> Link | None:
        """Return the first link with relation *rel*, or ``None``."""
        for candidate in self.links:
            if candidate.rel == rel:
                return candidate
        return None

    @property
    def edit_href(self) -> str:
        """Href of the ``edit`` link, or empty string when absent."""
        edit = self.link(EDIT_LINK_REL)
        return edit.href if edit else ""


@dataclass(frozen=True, slots=True)
class AssociationMember(SiteIdentity):
    """One site held in an association document, keyed by ``site_id``."""


@dataclass(frozen=True, slots=True)
class AssociationDocument:
    """The set of sites already paired with the owning site.

    Members keep the order the API returned them in.  ``site_id`` is
    unique within a document.

    Attributes:
        href: URI the document was read from.
        links: Relation links on the collection.
        members: Ordered association members.
    """

    href: str = ""
    links: tuple[Link, ...] = ()
    members: tuple[AssociationMember, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for member in self.members:
            if member.site_id in seen:
                raise ModelValidationError(
                    "AssociationDocument",
                    "members",
                    member.site_id,
                    "duplicate site_id",
                )
            seen.add(member.site_id)

    def __len__(self) -> int:
        return len(self.members)

    @property
    def site_ids(self) -> tuple[str, ...]:
        return tuple(m.site_id for m in self.members)

    def find(self, site_id: str) -> AssociationMember | None:
        """Return the member whose ``site_id`` equals *site_id* exactly."""
        for member in self.members:
            if member.site_id == site_id:
                return member
        return None

    def without(self, site_id: str) -> AssociationDocument:
        """Return a copy of this document with the member *site_id* removed.

        Other members are carried over unchanged, including their
        ``source`` bytes.  Removing an absent id returns an equal document.
        """
        return AssociationDocument(
            href=self.href,
            links=self.links,
            members=tuple(m for m in self.members if m.site_id != site_id),
        )
