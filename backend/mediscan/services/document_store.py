"""
MediScan API: Document Store Service
=====================================

What:  Read access to analyses, analytics and doctor statistics in MongoDB.
How:   DocumentStore is the abstract contract; MongoDocumentStore implements
       it with the async ``motor`` driver. Route handlers receive an instance
       through dependency injection, so tests substitute fakes freely.
Who:   Called by the reports, analytics, user-data, diagnostics and
       leaderboard routes.

Collections:
    analyses      one document per scan analysis, keyed by ``userId``
    doctorStats   one document per doctor (ratings summary)
    reviews       patient reviews of doctors
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import motor.motor_asyncio
from bson import ObjectId

from mediscan.exceptions import DocumentStoreError
from mediscan.utils.formatting import mask_email, truncate_text

logger = logging.getLogger(__name__)

IMAGE_TYPES = ("brain", "heart", "lungs", "liver")
RECENT_ACTIVITY_SIZE = 5
LEADERBOARD_RECENT_REVIEWS = 3
REVIEW_PREVIEW_LENGTH = 100


def _serialize(value: Any) -> Any:
    """Convert BSON types into JSON-friendly values."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    return value


def summarize_analyses(analyses: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Build the analytics summary for a user's analyses.

    ``analyses`` must be sorted newest first; the first five become
    ``recentActivity``.
    """
    total_scans = len(analyses)
    anomalies = sum(1 for a in analyses if a.get("anomalyDetected"))
    average_confidence = (
        sum(float(a.get("confidence") or 0) for a in analyses) / total_scans
        if total_scans
        else 0
    )

    scans_by_type = {
        kind: sum(1 for a in analyses if a.get("imageType") == kind)
        for kind in IMAGE_TYPES
    }

    recent_activity = []
    for a in analyses[:RECENT_ACTIVITY_SIZE]:
        patient = a.get("patient") or {}
        recent_activity.append({
            "_id": a.get("_id"),
            "analysisId": a.get("analysisId"),
            "imageType": a.get("imageType"),
            "anomalyDetected": bool(a.get("anomalyDetected")),
            "confidence": a.get("confidence"),
            "createdAt": a.get("createdAt"),
            "patientName": patient.get("name"),
        })

    return {
        "totalScans": total_scans,
        "anomaliesDetected": anomalies,
        "normalScans": total_scans - anomalies,
        "averageConfidence": average_confidence,
        "scansByType": scans_by_type,
        "recentActivity": recent_activity,
    }


class DocumentStore(ABC):
    """
    Contract for the document store collaborator.

    Every read method raises DocumentStoreError on driver failure.
    ``test_connection`` is the exception: it reports failure in its result.
    """

    @abstractmethod
    async def get_user_analyses(self, user_id: str) -> List[Dict[str, Any]]:
        """All analyses owned by ``user_id``, newest first."""
        ...

    @abstractmethod
    async def get_user_analytics(self, user_id: str) -> Dict[str, Any]:
        """Summary counters over the user's analyses."""
        ...

    @abstractmethod
    async def test_connection(self) -> Dict[str, Any]:
        """Round-trip check returning ``{"success": bool, "message": str}``."""
        ...

    @abstractmethod
    async def get_doctor_leaderboard(
        self, specialization: Optional[str] = None, limit: int = 10
    ) -> Dict[str, Any]:
        """Ranked doctors plus the available specializations."""
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """Cheap liveness probe for /health."""
        ...

    async def close(self) -> None:
        return None


class MongoDocumentStore(DocumentStore):
    """
    MongoDB implementation on top of motor.

    The client is created lazily on first use so the app starts even when
    MONGODB_URI is unset; reads then fail with DocumentStoreError.
    """

    def __init__(self, uri: str, database: str, timeout_ms: int = 5000):
        self._uri = uri
        self._database_name = database
        self._timeout_ms = timeout_ms
        self._client: Optional[motor.motor_asyncio.AsyncIOMotorClient] = None

    @property
    def db(self) -> motor.motor_asyncio.AsyncIOMotorDatabase:
        if not self._uri:
            raise DocumentStoreError(
                message="Document store is not configured",
                details="MONGODB_URI is not set",
            )
        if self._client is None:
            self._client = motor.motor_asyncio.AsyncIOMotorClient(
                self._uri, serverSelectionTimeoutMS=self._timeout_ms
            )
            logger.info("MongoDB client created for database '%s'", self._database_name)
        return self._client[self._database_name]

    async def get_user_analyses(self, user_id: str) -> List[Dict[str, Any]]:
        db = self.db
        try:
            cursor = db.analyses.find({"userId": user_id}).sort("createdAt", -1)
            documents = await cursor.to_list(length=None)
        except Exception as e:
            logger.error("Failed to fetch analyses for user %s: %s", user_id, e)
            raise DocumentStoreError(message="Failed to fetch analyses", details=str(e)) from e

        logger.debug("Fetched %d analyses for user %s", len(documents), user_id)
        return [_serialize(doc) for doc in documents]

    async def get_user_analytics(self, user_id: str) -> Dict[str, Any]:
        analyses = await self.get_user_analyses(user_id)
        return summarize_analyses(analyses)

    async def test_connection(self) -> Dict[str, Any]:
        """
        Ping the server, then insert, read back and delete a probe document.
        """
        try:
            db = self.db
            await db.command("ping")
            probe = {
                "probe": True,
                "createdAt": datetime.now(timezone.utc),
            }
            result = await db.connection_probes.insert_one(probe)
            found = await db.connection_probes.find_one({"_id": result.inserted_id})
            await db.connection_probes.delete_one({"_id": result.inserted_id})
        except Exception as e:
            logger.error("MongoDB connection test failed: %s", e)
            details = e.details if isinstance(e, DocumentStoreError) and e.details else str(e)
            return {"success": False, "message": f"Database connection failed: {details}"}

        if found is None:
            return {"success": False, "message": "Database operations failed"}
        return {
            "success": True,
            "message": "Database connection and operations working correctly",
        }

    async def get_doctor_leaderboard(
        self, specialization: Optional[str] = None, limit: int = 10
    ) -> Dict[str, Any]:
        db = self.db
        query: Dict[str, Any] = {}
        if specialization and specialization != "all":
            query["doctorSpecialization"] = specialization

        try:
            cursor = (
                db.doctorStats.find(query)
                .sort([("averageRating", -1), ("totalReviews", -1)])
                .limit(limit)
            )
            doctors = await cursor.to_list(length=limit)

            leaderboard = []
            for rank, doctor in enumerate(doctors, start=1):
                review_cursor = (
                    db.reviews.find({
                        "doctorName": doctor.get("doctorName"),
                        "doctorSpecialization": doctor.get("doctorSpecialization"),
                    })
                    .sort("createdAt", -1)
                    .limit(LEADERBOARD_RECENT_REVIEWS)
                )
                reviews = await review_cursor.to_list(length=LEADERBOARD_RECENT_REVIEWS)
                entry = _serialize(doctor)
                entry["rank"] = rank
                entry["recentReviews"] = [
                    {
                        "rating": review.get("rating"),
                        "comment": truncate_text(review.get("comment") or "", REVIEW_PREVIEW_LENGTH),
                        "patientEmail": mask_email(review.get("patientEmail") or ""),
                        "createdAt": _serialize(review.get("createdAt")),
                    }
                    for review in reviews
                ]
                leaderboard.append(entry)

            specializations = await db.doctorStats.distinct("doctorSpecialization")
        except Exception as e:
            logger.error("Failed to build doctor leaderboard: %s", e)
            raise DocumentStoreError(message="Failed to fetch leaderboard", details=str(e)) from e

        return {
            "leaderboard": leaderboard,
            "specializations": sorted(s for s in specializations if s),
            "currentFilter": specialization or "all",
        }

    async def ping(self) -> bool:
        try:
            await self.db.command("ping")
            return True
        except Exception as e:
            logger.warning("MongoDB ping failed: %s", e)
            return False

    async def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("MongoDB client closed")
