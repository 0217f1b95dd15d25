"""
Object visibility model
Three canonical states and their translation to S3 canned ACLs / grants
"""

from enum import Enum
from typing import Any, Dict, List, Union

from objectstore.core.exceptions import InvalidVisibilityError, UnknownACLError

ALL_USERS_URI = "http://acs.amazonaws.com/groups/global/AllUsers"


class ObjectVisibility(str, Enum):
    """Visibility of a stored object"""

    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"

    @property
    def is_public(self) -> bool:
        return self is not ObjectVisibility.PRIVATE

    @classmethod
    def parse(cls, value: Union["ObjectVisibility", str], object_path: str = None) -> "ObjectVisibility":
        """
        Coerce an enum member or its string value

        Raises:
            InvalidVisibilityError: For anything outside the three states
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidVisibilityError(value, object_path=object_path) from None


# Canned ACL names happen to match the visibility values one to one
_CANNED_ACLS = {
    ObjectVisibility.PRIVATE: "private",
    ObjectVisibility.PUBLIC_READ: "public-read",
    ObjectVisibility.PUBLIC_READ_WRITE: "public-read-write",
}


def to_canned_acl(visibility: Union[ObjectVisibility, str], object_path: str = None) -> str:
    """Map visibility to the service's canned ACL name"""
    return _CANNED_ACLS[ObjectVisibility.parse(visibility, object_path)]


def from_grants(grants: List[Dict[str, Any]], object_path: str = None) -> ObjectVisibility:
    """
    Map an object ACL (as returned by get_object_acl) back to a visibility

    Only grants to the AllUsers group matter; owner/canonical-user grants are
    what every private object carries. Any other group grant, or an AllUsers
    permission set that no canned ACL produces, is rejected.

    Raises:
        UnknownACLError: If the grant set has no canonical visibility
    """
    public_permissions = set()

    for grant in grants:
        grantee = grant.get("Grantee", {})
        grantee_type = grantee.get("Type")

        if grantee_type == "CanonicalUser":
            continue
        if grantee_type == "Group" and grantee.get("URI") == ALL_USERS_URI:
            public_permissions.add(grant.get("Permission"))
            continue

        raise UnknownACLError(grants, object_path=object_path)

    if not public_permissions:
        return ObjectVisibility.PRIVATE
    if public_permissions == {"READ"}:
        return ObjectVisibility.PUBLIC_READ
    if public_permissions == {"READ", "WRITE"}:
        return ObjectVisibility.PUBLIC_READ_WRITE

    raise UnknownACLError(grants, object_path=object_path)
