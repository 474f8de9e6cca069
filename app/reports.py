# app/reports.py
"""
Caller-side helpers for the report submission and moderation flow.

The verifier returns the model's raw judgement. Deciding whether a verdict
becomes a visible report happens here, in is_accepted(): a report is
admitted only when it is valid, not spam and not in the "invalid" category.
Anything that writes reports must go through it.

Storage itself is an external collaborator; these functions only build the
row payloads it expects and read rows back.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from dateutil import parser as dtparser

from .utils import is_valid_latitude, is_valid_longitude
from .verify import CATEGORIES

STATUS_VERIFIED = "verified"
STATUS_PENDING = "pending"
STATUS_REJECTED = "rejected"
STATUS_COMPLETED = "completed"
STATUSES = (STATUS_VERIFIED, STATUS_PENDING, STATUS_REJECTED, STATUS_COMPLETED)

# categories a stored report may carry; "invalid" verdicts never become reports
HAZARD_CATEGORIES = tuple(c for c in CATEGORIES if c != "invalid")

ADMIN_EDITABLE_FIELDS = ("title", "category", "status", "latitude", "longitude", "verified", "is_spam")


# ----------------------------- Verdict checks ----------------------------- #
def is_accepted(result: Mapping[str, Any]) -> bool:
    return (
        result.get("isValid") is True
        and result.get("isSpam") is not True
        and result.get("category") != "invalid"
    )


def rejection_message(result: Mapping[str, Any]) -> Optional[str]:
    """Text shown to the submitter, or None when the verdict is accepted."""
    if is_accepted(result):
        return None
    reason = result.get("reason") or "The image could not be verified as an urban hazard."
    if result.get("isSpam") is True:
        return f"Report flagged as spam: {reason}"
    return reason


# ----------------------------- Row payloads ----------------------------- #
def new_report_row(
    user_id: Optional[str],
    image_url: str,
    latitude: float,
    longitude: float,
    category: Optional[str] = None,
    title: Optional[str] = None,
    confidence: Optional[float] = None,
    verified: bool = False,
    spam: bool = False,
) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "image_url": image_url,
        "latitude": latitude,
        "longitude": longitude,
        "category": category or "pending",
        "title": title or "Pending Verification",
        "confidence": confidence or 0,
        "verified": verified,
        "is_spam": spam,
        "status": STATUS_VERIFIED,
    }


def verification_update(result: Mapping[str, Any]) -> Dict[str, Any]:
    """Update payload recording a verdict on an existing report."""
    accepted = is_accepted(result)
    return {
        "category": result.get("category"),
        "title": result.get("title"),
        "confidence": result.get("confidence"),
        "verified": accepted,
        "is_spam": result.get("isSpam") is True,
        "reason": result.get("reason"),
        "status": STATUS_VERIFIED if accepted else STATUS_REJECTED,
    }


def admin_update(**changes: Any) -> Dict[str, Any]:
    """
    Admin edit payload. Only ADMIN_EDITABLE_FIELDS may change; coordinates
    keep the same bounds as submitted reports.
    """
    unknown = sorted(set(changes) - set(ADMIN_EDITABLE_FIELDS))
    if unknown:
        raise ValueError(f"Fields not editable: {', '.join(unknown)}")
    if "category" in changes and changes["category"] not in HAZARD_CATEGORIES:
        raise ValueError(f"Unknown category: {changes['category']}")
    if "status" in changes and changes["status"] not in STATUSES:
        raise ValueError(f"Unknown status: {changes['status']}")
    if "latitude" in changes and not is_valid_latitude(changes["latitude"]):
        raise ValueError("Latitude must be a number between -90 and 90")
    if "longitude" in changes and not is_valid_longitude(changes["longitude"]):
        raise ValueError("Longitude must be a number between -180 and 180")
    return dict(changes)


def complete_update() -> Dict[str, Any]:
    """
    First step of marking a hazard resolved: record status "completed".
    Once this update succeeds the caller deletes the row, so resolved
    hazards leave the map and the admin list.
    """
    return {"status": STATUS_COMPLETED}


def image_object_path(user_id: Optional[str], now: datetime) -> str:
    """Object-storage key for an uploaded photo; anonymous uploads get their own folder."""
    ts = int(now.timestamp() * 1000)
    folder = user_id or f"anon-{ts}"
    return f"{folder}/{ts}.jpg"


# ----------------------------- Stored reports ----------------------------- #
def _parse_iso(ts: Optional[str]) -> Optional[datetime]:
    if not ts:
        return None
    try:
        return dtparser.isoparse(ts)
    except (ValueError, OverflowError):
        return None


@dataclass
class Report:
    id: str
    user_id: str
    image_url: str
    latitude: float
    longitude: float
    category: str
    title: str
    confidence: float
    verified: bool
    spam: bool
    status: Optional[str]
    created_at: Optional[datetime]

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Report":
        return cls(
            id=str(row["id"]),
            user_id=row.get("user_id") or "",
            image_url=row["image_url"],
            latitude=float(row["latitude"]),
            longitude=float(row["longitude"]),
            category=row.get("category") or "pending",
            title=row.get("title") or "",
            confidence=row.get("confidence") or 0,
            verified=bool(row.get("verified")),
            spam=bool(row.get("is_spam")),
            status=row.get("status"),
            created_at=_parse_iso(row.get("created_at")),
        )


def sorted_newest_first(reports: Iterable[Report]) -> List[Report]:
    """Admin view order; rows without a timestamp go last."""
    return sorted(
        reports,
        key=lambda r: (r.created_at is not None, r.created_at.timestamp() if r.created_at else 0.0),
        reverse=True,
    )


def map_reports(reports: Iterable[Report]) -> List[Report]:
    """Reports shown on the public map: verified and not spam, newest first."""
    return sorted_newest_first(r for r in reports if r.verified and not r.spam)
