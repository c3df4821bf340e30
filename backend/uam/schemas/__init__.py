from uam.schemas.section import SectionCreate, SectionUpdate, SectionResponse
from uam.schemas.location import LocationCreate, LocationUpdate, LocationResponse
from uam.schemas.company import CompanyCreate, CompanyUpdate, CompanyResponse
from uam.schemas.user import UserCreate, UserUpdate, UserResponse, RoleResponse
from uam.schemas.asset import AssetCreate, AssetUpdate, AssetResponse
from uam.schemas.asset_transfer import AssetMoveRequest, AssetMoveResponse, AssetMovementResponse, MovementKind
from uam.schemas.software_license import SoftwareLicenseCreate, SoftwareLicenseUpdate, SoftwareLicenseResponse
from uam.schemas.document import DocumentResponse, ImageUploadResponse

__all__ = [
    "SectionCreate", "SectionUpdate", "SectionResponse",
    "LocationCreate", "LocationUpdate", "LocationResponse",
    "CompanyCreate", "CompanyUpdate", "CompanyResponse",
    "UserCreate", "UserUpdate", "UserResponse", "RoleResponse",
    "AssetCreate", "AssetUpdate", "AssetResponse",
    "AssetMoveRequest", "AssetMoveResponse", "AssetMovementResponse", "MovementKind",
    "SoftwareLicenseCreate", "SoftwareLicenseUpdate", "SoftwareLicenseResponse",
    "DocumentResponse", "ImageUploadResponse",
]
