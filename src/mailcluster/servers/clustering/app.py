"""
Clustering Server - FastAPI application for email clustering operations.

Endpoints:
- POST /clustering/run - Cluster a batch of emails or a raw feature matrix
- POST /clustering/assign - Assign one new email or vector to the current clustering
- GET /clustering/session - Get parameters and summary of the current session
- DELETE /clustering/session - Clear the current session
"""

import logging
import math

import uvicorn
from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from mailcluster import __version__
from mailcluster.clustering.assignment import assign_to_session
from mailcluster.clustering.cluster_engine import ClusterEngine
from mailcluster.clustering.feature_util import EmailRecord, FeatureBuilder
from mailcluster.clustering.label_generator import (
    NOISE_NAME,
    determine_cluster_label,
    format_cluster_summary,
    label_clusters,
    label_from_summary,
)
from mailcluster.clustering.models import NOISE_LABEL, ParameterValidationError
from mailcluster.clustering.session_store import SessionStore
from mailcluster.common.config import ClusteringSettings
from mailcluster.servers.clustering.schemas import (
    AssignRequest,
    AssignResponse,
    ClusterInfo,
    EmailIn,
    RunClusteringRequest,
    RunClusteringResponse,
    SessionInfo,
    SuccessResponse,
)

app = FastAPI(title="Mail Clustering Server", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger = logging.getLogger(__name__)

settings = ClusteringSettings.from_env()
store = SessionStore()


def _to_record(email: EmailIn) -> EmailRecord:
    return EmailRecord.from_dict(email.model_dump())


def _validation_error(e: Exception) -> HTTPException:
    return HTTPException(status_code=422, detail=str(e))


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Mail Clustering Server", "version": __version__}


# ============================================================================
# Clustering
# ============================================================================


@app.post("/clustering/run", response_model=RunClusteringResponse)
def run_clustering(params: RunClusteringRequest):
    """
    Cluster a batch and install it as the current session.

    Emails take precedence over a raw matrix when both are given. The new
    session replaces any previous one in full.
    """
    if params.emails is None and params.matrix is None:
        raise _validation_error(ValueError("Provide either 'emails' or 'matrix'"))

    try:
        engine = ClusterEngine(
            dbscan_eps=settings.dbscan_eps if params.eps is None else params.eps,
            dbscan_min_pts=settings.dbscan_min_pts if params.min_pts is None else params.min_pts,
            verify_core_points=settings.verify_core_points,
        )

        records: list[EmailRecord] = []
        builder = None
        if params.emails is not None:
            records = [_to_record(e) for e in params.emails]
            builder = FeatureBuilder()
            matrix = builder.fit_transform(records)
        else:
            matrix = params.matrix

        session = engine.cluster(matrix)
        store.install(session, records=records, feature_builder=builder)

        labels = session.labels.tolist()
        if records:
            cluster_labels = label_clusters(records, labels)
        else:
            cluster_labels = label_from_summary(session.summary)

        return RunClusteringResponse(
            labels=labels,
            core_points=list(session.core_points),
            summary={str(k): v for k, v in session.summary.items()},
            clusters=[ClusterInfo(**c.to_dict()) for c in cluster_labels],
            summary_text=format_cluster_summary(cluster_labels),
            eps=session.eps,
            min_pts=session.min_pts,
        )

    except ParameterValidationError as e:
        raise _validation_error(e)
    except Exception as e:
        logger.error(f"Failed to run clustering: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/clustering/assign", response_model=AssignResponse)
def assign_record(params: AssignRequest):
    """Assign one new email or feature vector to the nearest core point's cluster."""
    installed = store.current()
    if installed is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No clustering session installed. Run /clustering/run first.",
        )
    if params.email is None and params.vector is None:
        raise _validation_error(ValueError("Provide either 'email' or 'vector'"))

    try:
        if params.email is not None:
            if installed.feature_builder is None:
                raise _validation_error(
                    ValueError("Session was built from a raw matrix; submit a 'vector' instead")
                )
            vector = installed.feature_builder.transform_one(_to_record(params.email))
        else:
            vector = params.vector

        session = installed.session
        assigned = assign_to_session(session, vector, eps=params.eps)

        cluster_name = NOISE_NAME
        cluster_size = 0
        if assigned.cluster != NOISE_LABEL:
            cluster_size = session.cluster_size(assigned.cluster)
            if installed.records:
                members = [
                    record
                    for record, label in zip(installed.records, session.labels)
                    if label == assigned.cluster
                ]
                cluster_name = determine_cluster_label(members)
            else:
                cluster_name = f"Cluster {assigned.cluster}"

        logger.info(f"Assigned record to cluster {assigned.cluster} (dist={assigned.dist:.3f})")

        return AssignResponse(
            cluster=assigned.cluster,
            dist=assigned.dist if math.isfinite(assigned.dist) else None,
            cluster_label=cluster_name,
            cluster_size=cluster_size,
        )

    except HTTPException:
        raise
    except ParameterValidationError as e:
        raise _validation_error(e)
    except Exception as e:
        logger.error(f"Failed to assign record: {e}")
        raise HTTPException(status_code=500, detail=str(e))


# ============================================================================
# Session Management
# ============================================================================


@app.get("/clustering/session", response_model=SessionInfo)
def get_session():
    """Get parameters and label counts of the installed session."""
    installed = store.current()
    if installed is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No clustering session installed")

    session = installed.session
    return SessionInfo(
        n_points=session.n_points,
        n_clusters=session.n_clusters,
        n_noise=session.n_noise,
        eps=session.eps,
        min_pts=session.min_pts,
        summary={str(k): v for k, v in session.summary.items()},
        core_points=list(session.core_points),
    )


@app.delete("/clustering/session", response_model=SuccessResponse)
def clear_session():
    """Drop the installed session."""
    if store.clear():
        logger.info("Cleared clustering session")
        return SuccessResponse(success=True, message="Clustering session cleared")
    return SuccessResponse(success=True, message="No clustering session was installed")


def run() -> None:
    """Start the clustering server with the configured host and port."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
