"""Add zoom_tenant_settings table

Revision ID: 001_add_zoom_tenant_settings
Revises:
Create Date: 2025-01-06 12:00:00.000000

"""
from alembic import op

# revision identifiers, used by Alembic.
revision = '001_add_zoom_tenant_settings'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.execute("""
        CREATE TABLE IF NOT EXISTS zoom_tenant_settings (
            id SERIAL PRIMARY KEY,
            tenant_id VARCHAR(64) NOT NULL UNIQUE,
            zoom_account_id VARCHAR(255),
            zoom_client_id VARCHAR(255),
            zoom_client_secret_enc TEXT,
            zoom_webhook_secret_enc TEXT,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMP NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMP NOT NULL DEFAULT NOW()
        )
    """)

    op.execute("CREATE INDEX IF NOT EXISTS ix_zoom_tenant_settings_tenant_id ON zoom_tenant_settings(tenant_id)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_zoom_tenant_settings_is_active ON zoom_tenant_settings(is_active)")


def downgrade():
    op.drop_index('ix_zoom_tenant_settings_is_active', 'zoom_tenant_settings')
    op.drop_index('ix_zoom_tenant_settings_tenant_id', 'zoom_tenant_settings')
    op.drop_table('zoom_tenant_settings')
