# synqit/services/serializers.py
"""
Model -> JSON-ready dict conversion shared by the services.
Keys are camelCase to match what the frontend consumes.
"""
from synqit.core.responses import enum_value, iso
from synqit.models import (
    Message,
    Notification,
    Partnership,
    Project,
    User,
)


def user_summary(u: User) -> dict:
    """Public subset of a user, embedded in other resources."""
    return {
        "id": str(u.id),
        "firstName": u.first_name,
        "lastName": u.last_name,
        "profileImage": u.profile_image,
        "userType": enum_value(u.user_type),
    }


def user_to_dict(u: User) -> dict:
    """The full account view, for the owner only (never includes secrets)."""
    return {
        "id": str(u.id),
        "email": u.email,
        "firstName": u.first_name,
        "lastName": u.last_name,
        "bio": u.bio,
        "profileImage": u.profile_image,
        "walletAddress": u.wallet_address,
        "userType": enum_value(u.user_type),
        "subscriptionTier": enum_value(u.subscription_tier),
        "isEmailVerified": u.is_email_verified,
        "twoFactorEnabled": u.two_factor_enabled,
        "lastLoginAt": iso(u.last_login_at),
        "createdAt": iso(u.created_at),
        "updatedAt": iso(u.updated_at),
    }


def project_to_dict(p: Project, include_owner: bool = False) -> dict:
    """
    Serialize a project. Children (tags, blockchain_preferences) must have
    been fetched with `fetch_related` / `prefetch_related` beforehand.
    """
    data = {
        "id": str(p.id),
        "ownerId": str(p.owner_id),
        "name": p.name,
        "description": p.description,
        "website": p.website,
        "logoUrl": p.logo_url,
        "bannerUrl": p.banner_url,
        "foundedYear": p.founded_year,
        "projectType": enum_value(p.project_type),
        "projectStage": enum_value(p.project_stage),
        "teamSize": enum_value(p.team_size),
        "fundingStage": enum_value(p.funding_stage),
        "tokenAvailability": enum_value(p.token_availability),
        "totalFunding": p.total_funding,
        "isLookingForFunding": p.is_looking_for_funding,
        "isLookingForPartners": p.is_looking_for_partners,
        "developmentFocus": p.development_focus,
        "contactEmail": p.contact_email,
        "twitterHandle": p.twitter_handle,
        "discordServer": p.discord_server,
        "telegramGroup": p.telegram_group,
        "redditCommunity": p.reddit_community,
        "githubUrl": p.github_url,
        "whitepaperUrl": p.whitepaper_url,
        "country": p.country,
        "city": p.city,
        "timezone": p.timezone,
        "trustScore": p.trust_score,
        "viewCount": p.view_count,
        "isVerified": p.is_verified,
        "createdAt": iso(p.created_at),
        "updatedAt": iso(p.updated_at),
        "tags": [t.tag for t in p.tags],
        "blockchainPreferences": [
            {"blockchain": enum_value(bp.blockchain), "isPrimary": bp.is_primary}
            for bp in p.blockchain_preferences
        ],
    }
    if include_owner:
        data["owner"] = user_summary(p.owner)
    return data


def project_summary(p: Project) -> dict:
    return {
        "id": str(p.id),
        "name": p.name,
        "logoUrl": p.logo_url,
        "bannerUrl": p.banner_url,
        "projectType": enum_value(p.project_type),
        "developmentFocus": p.development_focus,
    }


def partnership_to_dict(pt: Partnership, viewer_id=None, with_parties: bool = False) -> dict:
    data = {
        "id": str(pt.id),
        "requesterId": str(pt.requester_id),
        "requesterProjectId": str(pt.requester_project_id),
        "receiverId": str(pt.receiver_id),
        "receiverProjectId": str(pt.receiver_project_id),
        "partnershipType": enum_value(pt.partnership_type),
        "title": pt.title,
        "description": pt.description,
        "proposedTerms": pt.proposed_terms,
        "status": enum_value(pt.status),
        "respondedAt": iso(pt.responded_at),
        "createdAt": iso(pt.created_at),
        "updatedAt": iso(pt.updated_at),
    }
    if viewer_id is not None:
        is_requester = str(pt.requester_id) == str(viewer_id)
        data["isRequester"] = is_requester
        if with_parties:
            partner = pt.receiver if is_requester else pt.requester
            partner_project = pt.receiver_project if is_requester else pt.requester_project
            my_project = pt.requester_project if is_requester else pt.receiver_project
            data["partner"] = user_summary(partner)
            data["partnerProject"] = project_summary(partner_project)
            data["myProject"] = project_summary(my_project)
    return data


def message_to_dict(m: Message) -> dict:
    return {
        "id": str(m.id),
        "partnershipId": str(m.partnership_id),
        "senderId": str(m.sender_id),
        "receiverId": str(m.receiver_id),
        "content": m.content,
        "messageType": enum_value(m.message_type),
        "isRead": m.is_read,
        "createdAt": iso(m.created_at),
    }


def notification_to_dict(n: Notification) -> dict:
    return {
        "id": str(n.id),
        "title": n.title,
        "content": n.content,
        "notificationType": enum_value(n.notification_type),
        "partnershipId": str(n.partnership_id) if n.partnership_id else None,
        "isRead": n.is_read,
        "createdAt": iso(n.created_at),
    }
