"""initial uam schema

Revision ID: a1c0e5d2b7f4
Revises:
Create Date: 2026-10-18 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c0e5d2b7f4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ASSET_STATUS = sa.Enum('IN_USE', 'IN_STORAGE', 'UNDER_REPAIR', 'DISPOSED', 'LOST', name='assetstatus')
USER_STATUS = sa.Enum('ACTIVE', 'DISABLED', 'ON_VACATION', 'PENDING_APPROVAL', name='userstatus')
LICENSE_TYPE = sa.Enum(
    'OEM', 'RETAIL', 'VOLUME_MAK', 'VOLUME_KMS', 'SUBSCRIPTION_USER', 'SUBSCRIPTION_DEVICE',
    'CONCURRENT', 'FREEWARE', 'OPEN_SOURCE', 'OTHER', name='licensetype'
)


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)')),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('sections',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('management_level', sa.Integer(), nullable=True),
        sa.Column('email', sa.String(length=100), nullable=True),
        sa.Column('parent_section_id', sa.Integer(), nullable=True),
        *timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['parent_section_id'], ['sections.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_sections_id'), 'sections', ['id'], unique=False)
    op.create_index(op.f('ix_sections_name'), 'sections', ['name'], unique=False)

    op.create_table('companies',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tax_id', sa.String(length=50), nullable=False),
        sa.Column('legal_name', sa.String(length=100), nullable=False),
        sa.Column('trade_name', sa.String(length=100), nullable=True),
        sa.Column('email', sa.String(length=100), nullable=True),
        sa.Column('phone_number', sa.String(length=50), nullable=True),
        *timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_companies_id'), 'companies', ['id'], unique=False)
    op.create_index(op.f('ix_companies_tax_id'), 'companies', ['tax_id'], unique=True)

    op.create_table('locations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('section_id', sa.Integer(), nullable=True),
        *timestamps(),
        sa.ForeignKeyConstraint(['section_id'], ['sections.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('section_id', 'name', name='uq_locations_section_name')
    )
    op.create_index(op.f('ix_locations_id'), 'locations', ['id'], unique=False)
    op.create_index(op.f('ix_locations_name'), 'locations', ['name'], unique=False)
    op.create_index(op.f('ix_locations_section_id'), 'locations', ['section_id'], unique=False)

    op.create_table('roles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index(op.f('ix_roles_id'), 'roles', ['id'], unique=False)

    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=100), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('first_name', sa.String(length=50), nullable=True),
        sa.Column('last_name', sa.String(length=50), nullable=True),
        sa.Column('national_id', sa.String(length=20), nullable=True),
        sa.Column('status', USER_STATUS, nullable=False),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('section_id', sa.Integer(), nullable=True),
        sa.Column('avatar_url', sa.String(length=255), nullable=True),
        *timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['section_id'], ['sections.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=False)
    op.create_index(op.f('ix_users_national_id'), 'users', ['national_id'], unique=False)
    op.create_index(op.f('ix_users_section_id'), 'users', ['section_id'], unique=False)

    op.create_table('user_roles',
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('role_id', sa.Integer(), nullable=False),
        sa.Column('assigned_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('user_id', 'role_id')
    )

    op.create_table('assets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_name', sa.String(length=100), nullable=False),
        sa.Column('serial_number', sa.String(length=100), nullable=True),
        sa.Column('inventory_code', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('current_section_id', sa.Integer(), nullable=True),
        sa.Column('current_location_id', sa.Integer(), nullable=True),
        sa.Column('supplier_company_id', sa.Integer(), nullable=True),
        sa.Column('purchase_date', sa.Date(), nullable=True),
        sa.Column('invoice_number', sa.String(length=50), nullable=True),
        sa.Column('warranty_expiry_date', sa.Date(), nullable=True),
        sa.Column('acquisition_procedure', sa.String(length=200), nullable=True),
        sa.Column('status', ASSET_STATUS, nullable=False),
        sa.Column('image_url', sa.String(length=255), nullable=True),
        *timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['current_section_id'], ['sections.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['current_location_id'], ['locations.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['supplier_company_id'], ['companies.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_assets_id'), 'assets', ['id'], unique=False)
    op.create_index(op.f('ix_assets_serial_number'), 'assets', ['serial_number'], unique=False)
    op.create_index(op.f('ix_assets_inventory_code'), 'assets', ['inventory_code'], unique=False)
    op.create_index(op.f('ix_assets_current_section_id'), 'assets', ['current_section_id'], unique=False)
    op.create_index(op.f('ix_assets_current_location_id'), 'assets', ['current_location_id'], unique=False)

    op.create_table('asset_transfers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('asset_id', sa.Integer(), nullable=False),
        sa.Column('transfer_date', sa.DateTime(), nullable=False),
        sa.Column('from_section_id', sa.Integer(), nullable=True),
        sa.Column('from_location_id', sa.Integer(), nullable=True),
        sa.Column('to_section_id', sa.Integer(), nullable=True),
        sa.Column('to_location_id', sa.Integer(), nullable=True),
        sa.Column('authorized_by_user_id', sa.Integer(), nullable=False),
        sa.Column('received_by_user_id', sa.Integer(), nullable=True),
        sa.Column('received_date', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.ForeignKeyConstraint(['asset_id'], ['assets.id'], ),
        sa.ForeignKeyConstraint(['from_section_id'], ['sections.id'], ),
        sa.ForeignKeyConstraint(['from_location_id'], ['locations.id'], ),
        sa.ForeignKeyConstraint(['to_section_id'], ['sections.id'], ),
        sa.ForeignKeyConstraint(['to_location_id'], ['locations.id'], ),
        sa.ForeignKeyConstraint(['authorized_by_user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['received_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_asset_transfers_id'), 'asset_transfers', ['id'], unique=False)
    op.create_index(op.f('ix_asset_transfers_asset_id'), 'asset_transfers', ['asset_id'], unique=False)
    op.create_index(op.f('ix_asset_transfers_transfer_date'), 'asset_transfers', ['transfer_date'], unique=False)

    op.create_table('software_licenses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('software_name', sa.String(length=255), nullable=False),
        sa.Column('software_version', sa.String(length=100), nullable=True),
        sa.Column('license_key', sa.String(length=255), nullable=True),
        sa.Column('license_type', LICENSE_TYPE, nullable=False),
        sa.Column('seats', sa.Integer(), nullable=False),
        sa.Column('purchase_date', sa.Date(), nullable=True),
        sa.Column('purchase_cost', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('supplier_company_id', sa.Integer(), nullable=True),
        sa.Column('invoice_number', sa.String(length=100), nullable=True),
        sa.Column('assigned_to_user_id', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['supplier_company_id'], ['companies.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['assigned_to_user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_software_licenses_id'), 'software_licenses', ['id'], unique=False)
    op.create_index(op.f('ix_software_licenses_software_name'), 'software_licenses', ['software_name'], unique=False)
    op.create_index(op.f('ix_software_licenses_license_key'), 'software_licenses', ['license_key'], unique=False)

    op.create_table('asset_software_license_assignments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('asset_id', sa.Integer(), nullable=False),
        sa.Column('software_license_id', sa.Integer(), nullable=False),
        sa.Column('installation_date', sa.Date(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['asset_id'], ['assets.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['software_license_id'], ['software_licenses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_asset_software_license_assignments_id'), 'asset_software_license_assignments', ['id'], unique=False)
    op.create_index(op.f('ix_asset_software_license_assignments_asset_id'), 'asset_software_license_assignments', ['asset_id'], unique=False)
    op.create_index(op.f('ix_asset_software_license_assignments_software_license_id'), 'asset_software_license_assignments', ['software_license_id'], unique=False)

    op.create_table('documents',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('original_filename', sa.String(length=255), nullable=False),
        sa.Column('stored_filename', sa.String(length=255), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=False),
        sa.Column('file_size_bytes', sa.Integer(), nullable=False),
        sa.Column('storage_path', sa.String(length=255), nullable=False),
        sa.Column('entity_type', sa.String(length=50), nullable=True),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('document_category', sa.String(length=50), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('uploaded_by_user_id', sa.Integer(), nullable=True),
        *timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['uploaded_by_user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('stored_filename')
    )
    op.create_index(op.f('ix_documents_id'), 'documents', ['id'], unique=False)
    op.create_index(op.f('ix_documents_entity_type'), 'documents', ['entity_type'], unique=False)
    op.create_index(op.f('ix_documents_entity_id'), 'documents', ['entity_id'], unique=False)

    # Base role for administrative rights
    op.bulk_insert(
        sa.table('roles', sa.column('name', sa.String), sa.column('description', sa.String)),
        [{'name': 'Admin', 'description': 'Administrative rights'}]
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('documents')
    op.drop_table('asset_software_license_assignments')
    op.drop_table('software_licenses')
    op.drop_table('asset_transfers')
    op.drop_table('assets')
    op.drop_table('user_roles')
    op.drop_table('users')
    op.drop_table('roles')
    op.drop_table('locations')
    op.drop_table('companies')
    op.drop_table('sections')
