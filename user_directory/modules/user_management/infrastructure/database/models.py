# 📄 File: user_directory/modules/user_management/infrastructure/database/models.py
# 🧭 Purpose (Layman Explanation):
# Defines the table where user profiles live when the directory runs on a SQL database.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy ORM model for the user profile document table. The primary key column is
# named "_id" to match the document layout; phone_number carries a non-unique index
# used by the secondary lookup.
#
# 🔗 Dependencies:
# - SQLAlchemy ORM
# - user_directory.shared.config.database (DatabaseBase)
#
# 🔄 Connected Modules / Calls From:
# - user_record_store_impl.py (SQLUserRecordStore)

"""
SQLAlchemy Models for the User Directory

Models:
- UserRecordModel: one row per user profile document

Phone number uniqueness is intentionally left to the service layer
(read-before-write), so the index on phone_number is not unique.
"""

from sqlalchemy import Column, String, Text

from user_directory.shared.config.database import DatabaseBase


# =============================================================================
# USER PROFILE DOCUMENT
# =============================================================================

class UserRecordModel(DatabaseBase):
    """SQLAlchemy model for a stored user profile document."""

    __tablename__ = "user_profiles"

    # Primary key, stored under the document field name "_id"
    record_id = Column("_id", String(255), primary_key=True)

    name = Column(Text, nullable=False, default="")
    phone_number = Column(String(255), nullable=False, default="", index=True)
    image_url = Column(Text, nullable=False, default="")
    status = Column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<UserRecordModel(_id={self.record_id}, phone_number={self.phone_number})>"
