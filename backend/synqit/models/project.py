# synqit/models/project.py
"""
Database models for projects and their child collections.
A project is owned by exactly one user; blockchain preferences and tags
are replaced as whole sets, never diffed.
"""
import uuid
from tortoise import fields, models

from synqit.models.enums import (
    Blockchain,
    FundingStage,
    ProjectStage,
    ProjectType,
    TeamSize,
    TokenAvailability,
)


class Project(models.Model):
    """
    Project database model (also presented as a "company" in the directory).

    Relationships:
    - Belongs to one User (one-to-one; `owner` is unique)
    - Has many BlockchainPreferences and ProjectTags
    - Has many Partnerships, as requester or receiver project
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    owner = fields.OneToOneField("models.User", related_name="project", on_delete=fields.CASCADE)

    name = fields.CharField(max_length=100)
    description = fields.TextField()
    website = fields.CharField(max_length=512, null=True)
    logo_url = fields.CharField(max_length=1024, null=True)
    banner_url = fields.CharField(max_length=1024, null=True)
    founded_year = fields.IntField(null=True)

    project_type = fields.CharEnumField(ProjectType, max_length=32, null=True)
    project_stage = fields.CharEnumField(ProjectStage, max_length=32, null=True)
    team_size = fields.CharEnumField(TeamSize, max_length=32, null=True)
    funding_stage = fields.CharEnumField(FundingStage, max_length=32, null=True)
    token_availability = fields.CharEnumField(TokenAvailability, max_length=32, null=True)
    total_funding = fields.FloatField(null=True)

    is_looking_for_funding = fields.BooleanField(default=False)
    is_looking_for_partners = fields.BooleanField(default=False)
    development_focus = fields.CharField(max_length=200, null=True)

    contact_email = fields.CharField(max_length=256, null=True)
    twitter_handle = fields.CharField(max_length=32, null=True)
    discord_server = fields.CharField(max_length=512, null=True)
    telegram_group = fields.CharField(max_length=512, null=True)
    reddit_community = fields.CharField(max_length=512, null=True)
    github_url = fields.CharField(max_length=512, null=True)
    whitepaper_url = fields.CharField(max_length=512, null=True)

    country = fields.CharField(max_length=100, null=True)
    city = fields.CharField(max_length=100, null=True)
    timezone = fields.CharField(max_length=64, null=True)

    trust_score = fields.IntField(default=0)
    view_count = fields.IntField(default=0)
    is_verified = fields.BooleanField(default=False)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "projects"


class BlockchainPreference(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    project = fields.ForeignKeyField(
        "models.Project", related_name="blockchain_preferences", on_delete=fields.CASCADE
    )
    blockchain = fields.CharEnumField(Blockchain, max_length=32)
    is_primary = fields.BooleanField(default=False)

    class Meta:
        table = "blockchain_preferences"


class ProjectTag(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    project = fields.ForeignKeyField("models.Project", related_name="tags", on_delete=fields.CASCADE)
    tag = fields.CharField(max_length=50)

    class Meta:
        table = "project_tags"
