from uam.models.user import User, Role, UserStatus, user_roles, ADMIN_ROLE
from uam.models.section import Section
from uam.models.location import Location
from uam.models.company import Company
from uam.models.asset import Asset, AssetStatus
from uam.models.asset_transfer import AssetTransfer
from uam.models.software_license import SoftwareLicense, AssetSoftwareLicenseAssignment, LicenseType
from uam.models.document import Document

__all__ = [
    "User",
    "Role",
    "UserStatus",
    "user_roles",
    "ADMIN_ROLE",
    "Section",
    "Location",
    "Company",
    "Asset",
    "AssetStatus",
    "AssetTransfer",
    "SoftwareLicense",
    "AssetSoftwareLicenseAssignment",
    "LicenseType",
    "Document",
]
