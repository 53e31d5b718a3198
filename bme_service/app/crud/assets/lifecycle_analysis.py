# app/crud/assets/lifecycle_analysis.py
"""
Age / cost / utilization calculators and the replacement scoring engine.

The calculators and ``score_asset`` / ``generate_replacement_recommendations``
are pure: they read attributes off whatever asset-like object they are given
(ORM row or plain snapshot) and never touch the database. The ``get_*`` and
``apply_*`` functions at the bottom load assets and, for ``apply``, write the
replacement flags back.
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...enum.asset_enum import LifecycleState, Recommendation, ReplacementPriority
from ...models.assets.assets import Asset
from ...schemas.assets.lifecycle_schemas import (
    ApplyRecommendationsResult,
    EndOfLifeNotification,
    ReplacementRecommendationOut,
    ReplacementThresholds,
)

logger = logging.getLogger(__name__)

SECONDS_PER_YEAR = 365 * 24 * 60 * 60
REPLACEMENT_COST_INFLATION = 1.1
SIGNIFICANT_SCORE = 30


# ----------------------------------------------------------------------
# CALCULATORS
# ----------------------------------------------------------------------

def _as_datetime(value) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return datetime.fromisoformat(str(value)).replace(tzinfo=None)


def calculate_asset_age(purchase_date, now: Optional[datetime] = None) -> float:
    """Age in years (365-day years), rounded to 2 decimals. 0 when the date is unknown."""
    purchased = _as_datetime(purchase_date)
    if purchased is None:
        return 0
    now = _as_datetime(now) or datetime.utcnow()
    return round((now - purchased).total_seconds() / SECONDS_PER_YEAR, 2)


def calculate_service_cost_ratio(total_service_cost, value) -> float:
    if not value or not total_service_cost:
        return 0.0
    return float(total_service_cost) / float(value)


def calculate_downtime_hours(asset) -> float:
    return float(getattr(asset, "total_downtime_hours", None) or 0)


def calculate_utilization(asset) -> float:
    return float(getattr(asset, "utilization_percentage", None) or 0)


# ----------------------------------------------------------------------
# SCORING
# ----------------------------------------------------------------------

def _recommendation_for(score: float) -> Recommendation:
    if score >= 60:
        return Recommendation.replace
    if score >= 40:
        return Recommendation.monitor
    return Recommendation.maintain


def _priority_for(score: float) -> ReplacementPriority:
    if score >= 70:
        return ReplacementPriority.high
    if score >= 50:
        return ReplacementPriority.medium
    return ReplacementPriority.low


def score_asset(
    asset,
    thresholds: Optional[ReplacementThresholds] = None,
    now: Optional[datetime] = None,
) -> ReplacementRecommendationOut:
    """Score a single asset. Always returns a result, even below the significance cut."""
    thresholds = thresholds or ReplacementThresholds()

    age = calculate_asset_age(asset.purchase_date, now)
    cost_ratio = calculate_service_cost_ratio(
        asset.total_service_cost, asset.value)
    downtime = calculate_downtime_hours(asset)
    utilization = calculate_utilization(asset)

    reasons: List[str] = []
    score = 0.0

    if age >= thresholds.min_age:
        reasons.append(
            f"Asset age is {age:.1f} years (threshold: {thresholds.min_age:g} years)")
        score += min(age / thresholds.min_age, 2) * 20

    if cost_ratio >= thresholds.max_service_cost_ratio:
        reasons.append(
            f"Service cost ratio is {cost_ratio * 100:.1f}% "
            f"(threshold: {thresholds.max_service_cost_ratio * 100:.1f}%)")
        score += min(cost_ratio / thresholds.max_service_cost_ratio, 2) * 20

    if downtime >= thresholds.min_downtime_hours:
        reasons.append(
            f"Total downtime is {downtime:g} hours (threshold: {thresholds.min_downtime_hours:g} hours)")
        score += min(downtime / thresholds.min_downtime_hours, 1.5) * 10

    # low but non-zero utilization; zero means "not measured"
    if 0 < utilization < thresholds.min_utilization:
        reasons.append(
            f"Utilization is {utilization:.1f}% (threshold: {thresholds.min_utilization:g}%)")
        score += (thresholds.min_utilization - utilization) / \
            thresholds.min_utilization * 5

    score = max(0.0, min(score, 100.0))

    value = float(asset.value) if asset.value else None
    replacement_date = None
    if asset.purchase_date:
        replacement_date = (
            _as_datetime(asset.purchase_date)
            + timedelta(days=(thresholds.min_age + 2) * 365)
        ).date()

    return ReplacementRecommendationOut(
        asset_tag=asset.tag,
        asset_name=asset.name,
        recommendation=_recommendation_for(score),
        priority=_priority_for(score),
        score=score,
        reasons=reasons,
        estimated_replacement_cost=value *
        REPLACEMENT_COST_INFLATION if value else None,
        estimated_replacement_date=replacement_date,
    )


def generate_replacement_recommendations(
    assets: Iterable,
    thresholds: Optional[ReplacementThresholds] = None,
    now: Optional[datetime] = None,
) -> List[ReplacementRecommendationOut]:
    """Rank assets by replacement score, highest first, keeping only significant scores."""
    thresholds = thresholds or ReplacementThresholds()
    now = now or datetime.utcnow()

    recommendations = []
    for asset in assets:
        try:
            result = score_asset(asset, thresholds, now)
        except (TypeError, ValueError) as e:
            logger.warning("Skipping asset %s during replacement scoring: %s",
                           getattr(asset, "tag", "?"), e)
            continue

        if result.score > SIGNIFICANT_SCORE:
            recommendations.append(result)

    return sorted(recommendations, key=lambda r: r.score, reverse=True)


# ----------------------------------------------------------------------
# DB BACKED OPERATIONS
# ----------------------------------------------------------------------

def get_scoring_candidates(db: Session) -> List[Asset]:
    return (
        db.query(Asset)
        .filter(
            Asset.lifecycle_state != LifecycleState.disposed.value,
            or_(Asset.replacement_recommended == False,
                Asset.replacement_recommended.is_(None)),
        )
        .all()
    )


def get_replacement_recommendations(db: Session, thresholds: ReplacementThresholds):
    return generate_replacement_recommendations(get_scoring_candidates(db), thresholds)


def apply_replacement_flags(db: Session, thresholds: ReplacementThresholds) -> ApplyRecommendationsResult:
    candidates = get_scoring_candidates(db)
    by_tag = {asset.tag: asset for asset in candidates}
    recommendations = generate_replacement_recommendations(
        candidates, thresholds)

    for rec in recommendations:
        asset = by_tag[rec.asset_tag]
        asset.replacement_recommended = rec.recommendation == Recommendation.replace
        asset.replacement_reason = "; ".join(rec.reasons)

    db.commit()
    logger.info("Replacement flags applied: %d evaluated, %d recommended",
                len(candidates), len(recommendations))

    return ApplyRecommendationsResult(
        evaluated=len(candidates),
        flagged_for_replacement=sum(
            1 for r in recommendations if r.recommendation == Recommendation.replace),
        updated_tags=[r.asset_tag for r in recommendations],
    )


def get_assets_nearing_end_of_life(db: Session, threshold_years: int = 5) -> List[Asset]:
    threshold_date = date.today() - relativedelta(years=threshold_years)

    return (
        db.query(Asset)
        .filter(
            Asset.purchase_date != None,
            Asset.purchase_date <= threshold_date,
            Asset.lifecycle_state != LifecycleState.disposed.value,
        )
        .order_by(Asset.purchase_date.asc())
        .all()
    )


def get_end_of_life_notifications(db: Session, threshold_years: int = 5) -> List[EndOfLifeNotification]:
    notifications = []
    for asset in get_assets_nearing_end_of_life(db, threshold_years):
        age = calculate_asset_age(asset.purchase_date)
        notifications.append(EndOfLifeNotification(
            asset_tag=asset.tag,
            asset_name=asset.name,
            age=age,
            message=f'Asset "{asset.name}" is {age:.1f} years old and may need replacement consideration.',
        ))
    return notifications
