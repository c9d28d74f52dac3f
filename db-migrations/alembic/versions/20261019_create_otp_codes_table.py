"""
Alembic migration to create the otp_codes table
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261019'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'otp_codes',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.String, nullable=False),
        sa.Column('email', sa.String, nullable=False),
        sa.Column('code', sa.String(6), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('used', sa.Boolean, nullable=False, server_default=sa.text('false')),
    )
    op.create_index('ix_otp_codes_email', 'otp_codes', ['email'])
    op.create_index('idx_otp_codes_email_code', 'otp_codes', ['email', 'code'])

def downgrade():
    op.drop_index('idx_otp_codes_email_code', table_name='otp_codes')
    op.drop_index('ix_otp_codes_email', table_name='otp_codes')
    op.drop_table('otp_codes')
