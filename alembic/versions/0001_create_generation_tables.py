"""create profiles, projects, generation_versions and generated_files tables

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("generation_credits", sa.Integer(), nullable=False),
        sa.Column("plan", sa.String(length=32), nullable=False),
    )
    op.create_table(
        "projects",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("owner_id", sa.String(length=64), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("site_type", sa.String(length=32), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("generation_config", sa.JSON(), nullable=True),
        sa.Column("last_generated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_projects_owner_id", "projects", ["owner_id"])
    op.create_table(
        "generation_versions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("project_id", sa.String(length=36), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("version_number", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("trigger", sa.String(length=32), nullable=False),
        sa.Column("model_used", sa.String(length=100), nullable=True),
        sa.Column("generation_time_ms", sa.Integer(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("project_id", "version_number", name="uq_version_number"),
    )
    op.create_index("ix_generation_versions_project_id", "generation_versions", ["project_id"])
    op.create_table(
        "generated_files",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("version_id", sa.String(length=36), sa.ForeignKey("generation_versions.id"), nullable=False),
        sa.Column("project_id", sa.String(length=36), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("file_path", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("file_type", sa.String(length=20), nullable=False),
        sa.Column("section_type", sa.String(length=40), nullable=True),
        sa.UniqueConstraint("version_id", "file_path", name="uq_version_file_path"),
    )
    op.create_index("ix_generated_files_version_id", "generated_files", ["version_id"])

def downgrade():
    op.drop_table("generated_files")
    op.drop_table("generation_versions")
    op.drop_table("projects")
    op.drop_table("profiles")
