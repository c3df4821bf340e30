"""
Asset transfer workflow.
Moves (or disposes of) one asset and writes the matching audit row in a
single transaction.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import update
from sqlalchemy.orm import Session

from uam.models.asset import Asset, AssetStatus
from uam.models.asset_transfer import AssetTransfer
from uam.models.location import Location
from uam.models.section import Section
from uam.models.user import User
from uam.schemas.asset_transfer import AssetMoveRequest, MovementKind

logger = logging.getLogger(__name__)


class AssetTransferError(Exception):
    """Base class for failures of the transfer workflow."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransferNotFound(AssetTransferError):
    pass


class TransferForbidden(AssetTransferError):
    pass


class TransferConflict(AssetTransferError):
    pass


@dataclass
class Placement:
    section_id: Optional[int]
    location_id: Optional[int]


@dataclass
class TransferResult:
    transfer_id: int
    asset_id: int
    from_placement: Placement
    to_placement: Placement
    status: AssetStatus


class AssetTransferService:
    """Runs one asset movement on the given session."""

    def __init__(self, db: Session):
        self.db = db

    # ============== Resolve-or-fail helpers ==============

    def _get_asset(self, asset_id: int) -> Asset:
        asset = self.db.query(Asset).filter(
            Asset.id == asset_id,
            Asset.deleted_at.is_(None)
        ).first()
        if not asset:
            raise TransferNotFound(f"Asset with ID {asset_id} not found")
        return asset

    def _resolve_section(self, name: str, role: str) -> int:
        section = self.db.query(Section).filter(
            Section.name == name,
            Section.deleted_at.is_(None)
        ).first()
        if not section:
            raise TransferNotFound(f"{role} section '{name}' not found")
        return section.id

    def _resolve_location(self, name: str, section_id: int) -> int:
        location = self.db.query(Location).filter(
            Location.name == name,
            Location.section_id == section_id
        ).first()
        if not location:
            raise TransferNotFound(f"Location '{name}' not found in the target section")
        return location.id

    def _resolve_user(self, national_id: str, role: str) -> int:
        user = self.db.query(User).filter(
            User.national_id == national_id,
            User.deleted_at.is_(None)
        ).first()
        if not user:
            raise TransferNotFound(f"{role} user with national ID '{national_id}' not found")
        return user.id

    # ============== Workflow ==============

    def move(self, asset_id: int, request: AssetMoveRequest, caller_id: int) -> TransferResult:
        """
        Moves the asset to the requested section/location (or disposes of it)
        and appends an AssetTransfer row. Commits on success, rolls back on any
        failure and re-raises.
        """
        try:
            result = self._move(asset_id, request, caller_id)
            self.db.commit()
        except TransferForbidden as e:
            self.db.rollback()
            logger.warning(
                "Transfer of asset %s refused for user %s: %s", asset_id, caller_id, e.message
            )
            raise
        except AssetTransferError as e:
            self.db.rollback()
            logger.warning("Transfer of asset %s rolled back: %s", asset_id, e.message)
            raise
        except Exception:
            self.db.rollback()
            logger.exception("Unexpected failure while transferring asset %s", asset_id)
            raise

        logger.info(
            "Asset %s moved (%s) by user %s, transfer %s",
            asset_id, request.movement_kind.value, caller_id, result.transfer_id
        )
        return result

    def _move(self, asset_id: int, request: AssetMoveRequest, caller_id: int) -> TransferResult:
        asset = self._get_asset(asset_id)
        from_placement = Placement(asset.current_section_id, asset.current_location_id)

        self._resolve_section(request.caller_section_name, "Origin")
        target_section_id = self._resolve_section(request.target_section_name, "Target")
        target_location_id = self._resolve_location(request.target_location_name, target_section_id)

        authorizing_user_id = self._resolve_user(request.authorizing_user_national_id, "Authorizing")
        if authorizing_user_id != caller_id:
            raise TransferForbidden("The authorizing user must be the logged-in user")
        receiving_user_id = self._resolve_user(request.receiving_user_national_id, "Receiving")

        if request.movement_kind == MovementKind.DISPOSAL:
            new_status = AssetStatus.DISPOSED
            to_placement = Placement(None, None)
        else:
            new_status = asset.status
            to_placement = Placement(target_section_id, target_location_id)

        updated = self.db.execute(
            update(Asset)
            .where(Asset.id == asset_id, Asset.deleted_at.is_(None))
            .values(
                current_section_id=to_placement.section_id,
                current_location_id=to_placement.location_id,
                status=new_status,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        if updated.rowcount != 1:
            raise TransferConflict("The asset could not be updated")

        transfer = AssetTransfer(
            asset_id=asset_id,
            transfer_date=request.transfer_date,
            from_section_id=from_placement.section_id,
            from_location_id=from_placement.location_id,
            to_section_id=target_section_id,
            to_location_id=target_location_id,
            authorized_by_user_id=authorizing_user_id,
            received_by_user_id=receiving_user_id,
            received_date=request.received_date,
            notes=f"Movement type: {request.movement_kind.label}.",
        )
        self.db.add(transfer)
        self.db.flush()

        # Loaded instance still holds the pre-update placement
        self.db.expire(asset)

        return TransferResult(
            transfer_id=transfer.id,
            asset_id=asset_id,
            from_placement=from_placement,
            to_placement=to_placement,
            status=new_status,
        )
