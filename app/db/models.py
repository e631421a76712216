from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import String, DateTime, Enum, ForeignKey, Integer, JSON, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.session import Base
from app.core.workflow import ProjectStatus, TriggerType, VersionStatus


def _uuid() -> str:
    return str(uuid.uuid4())


def _enum(enum_cls):
    # Store the wire values ("full-regenerate"), not the member names
    return Enum(enum_cls, values_callable=lambda e: [m.value for m in e], native_enum=False, length=32)


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    generation_credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    plan: Mapped[str] = mapped_column(String(32), nullable=False, default="free")


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    owner_id: Mapped[str] = mapped_column(String(64), ForeignKey("profiles.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    site_type: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[ProjectStatus] = mapped_column(_enum(ProjectStatus), default=ProjectStatus.DRAFT, nullable=False)
    generation_config: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    last_generated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    versions: Mapped[list[GenerationVersion]] = relationship(back_populates="project", order_by="GenerationVersion.version_number")


class GenerationVersion(Base):
    __tablename__ = "generation_versions"
    __table_args__ = (UniqueConstraint("project_id", "version_number", name="uq_version_number"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    project_id: Mapped[str] = mapped_column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[VersionStatus] = mapped_column(_enum(VersionStatus), default=VersionStatus.PENDING, nullable=False)
    trigger: Mapped[TriggerType] = mapped_column(_enum(TriggerType), default=TriggerType.INITIAL, nullable=False)
    model_used: Mapped[str | None] = mapped_column(String(100), nullable=True)
    generation_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    project: Mapped[Project] = relationship(back_populates="versions")
    files: Mapped[list[GeneratedFile]] = relationship(back_populates="version", order_by="GeneratedFile.file_path")


class GeneratedFile(Base):
    __tablename__ = "generated_files"
    __table_args__ = (UniqueConstraint("version_id", "file_path", name="uq_version_file_path"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    version_id: Mapped[str] = mapped_column(String(36), ForeignKey("generation_versions.id"), nullable=False, index=True)
    project_id: Mapped[str] = mapped_column(String(36), ForeignKey("projects.id"), nullable=False)
    file_path: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    file_type: Mapped[str] = mapped_column(String(20), nullable=False)
    section_type: Mapped[str | None] = mapped_column(String(40), nullable=True)

    version: Mapped[GenerationVersion] = relationship(back_populates="files")
