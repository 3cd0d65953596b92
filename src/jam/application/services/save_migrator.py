"""Save blob format, version migrations and tolerant loading.

The blob is a flat JSON object. Loading reads every top-level field on its
own: a malformed value is logged and replaced with its default so one bad
field never costs the player the rest of the save.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Callable, Dict, List, Mapping, Optional

from jam.application.services.balance_tables import grade_from_score
from jam.domain.models.calendar import EventResolution
from jam.domain.models.career import DEFAULT_PERFORMER_NAME, SEASON_LENGTH, CareerState
from jam.domain.models.dice import SKILLS, DiceResult, DiceTable
from jam.domain.models.release import GRADES, GigEvent, ReleaseRecord
from jam.domain.models.song import SongConcept, normalize_genre, normalize_song_name, normalize_theme
from jam.domain.models.stats import STARTING_STAT, STAT_NAMES, PerformerStats, clamp_stat
from jam.domain.models.week_plan import DAYS_PER_WEEK, MAX_GIGS_PER_WEEK, DayEntry, WeekPlan


logger = logging.getLogger(__name__)

SAVE_VERSION = 5
LEGACY_VERSION = 3
SAVE_KEY = "performer-jam-save-v3"

_ACTIVITY_STAT = {"practice": "vocals", "write": "writing", "perform": "stage"}
_DERIVED_KEYS = ("trendsByWeek",)
_LEGACY_GRADES = {"Masterpiece": "S"}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


# --- serialization -------------------------------------------------------


def _dice_payload(dice: DiceTable) -> Dict[str, Any]:
    return {
        skill: (None if result is None else {"faces": int(result.faces), "value": int(result.value)})
        for skill, result in dice.items()
    }


def _entry_payload(entry: DayEntry) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "t": entry.activity,
        "gains": {name: float(value) for name, value in entry.gains},
        "triad": float(entry.triad),
    }
    if entry.song_ref is not None:
        payload["ref"] = entry.song_ref
    return payload


def _record_payload(record: ReleaseRecord) -> Dict[str, Any]:
    return {
        "week": int(record.week),
        "releaseWeek": int(record.release_week),
        "songName": record.song_name,
        "genre": record.genre,
        "theme": record.theme,
        "venue": record.venue,
        "score": float(record.score),
        "grade": record.grade,
        "chartPos": int(record.chart_pos),
        "moneyGain": int(record.money_gain),
        "fansGain": int(record.fans_gain),
        "feedback": list(record.feedback),
        "review": record.review,
        "fanComments": list(record.fan_comments),
        "gigs": [
            {"week": int(gig.week), "venue": gig.venue, "moneyGain": int(gig.money_gain), "fansGain": int(gig.fans_gain)}
            for gig in record.gigs
        ],
    }


def serialize(state: CareerState) -> Dict[str, Any]:
    gains = state.plan.gains()
    return {
        "version": SAVE_VERSION,
        "week": int(state.week),
        "money": int(state.money),
        "fans": int(state.fans),
        "vocals": float(state.stats.vocals),
        "writing": float(state.stats.writing),
        "stage": float(state.stats.stage),
        "genre": state.concept.genre,
        "theme": state.concept.theme,
        "songName": state.concept.name,
        "conceptLocked": bool(state.concept_locked),
        "plan": [_entry_payload(entry) for entry in state.plan.entries],
        "weekVocGain": gains["vocals"],
        "weekWriGain": gains["writing"],
        "weekStageGain": gains["stage"],
        "diceBest": _dice_payload(state.dice),
        "history": [_record_payload(record) for record in state.history],
        "finishedReady": bool(state.finished_ready),
        "performerName": state.performer_name,
        "vinylUnlocked": bool(state.vinyl_unlocked),
        "calendarSeed": int(state.calendar_seed),
        "eventsResolved": [
            {"id": row.event_id, "choice": row.choice_index} for row in state.events_resolved
        ],
    }


def dumps(state: CareerState) -> str:
    return json.dumps(serialize(state), ensure_ascii=False, sort_keys=True)


# --- migrations ----------------------------------------------------------


def _migrate_v3_to_v4(payload: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(payload.get("vinylUnlocked"), bool):
        payload["vinylUnlocked"] = False
    return payload


def _legacy_action_to_entry(raw: Any) -> Optional[Dict[str, Any]]:
    if isinstance(raw, str):
        activity = raw
        delta = 0.0
        triad = 0.0
    elif isinstance(raw, Mapping):
        activity = raw.get("t")
        delta = float(raw["d"]) if _is_number(raw.get("d")) else 0.0
        triad = sum(float(raw[key]) for key in ("m", "l", "p") if _is_number(raw.get(key)))
    else:
        return None
    if activity not in _ACTIVITY_STAT:
        return None
    return {"t": activity, "gains": {_ACTIVITY_STAT[activity]: delta}, "triad": triad}


def _migrate_legacy_grade(raw: Any) -> Any:
    if isinstance(raw, Mapping) and isinstance(raw.get("grade"), str) and raw["grade"] in _LEGACY_GRADES:
        return {**raw, "grade": _LEGACY_GRADES[raw["grade"]]}
    return raw


def _migrate_v4_to_v5(payload: Dict[str, Any]) -> Dict[str, Any]:
    if "plan" not in payload and isinstance(payload.get("actions"), list):
        converted = [_legacy_action_to_entry(item) for item in payload["actions"]]
        payload["plan"] = [item for item in converted if item is not None]
        dropped = len(converted) - len(payload["plan"])
        if dropped:
            logger.warning("Dropped %d unrecognised legacy actions while migrating save", dropped)
    payload.pop("actions", None)
    if "diceBest" not in payload and "rollBest" in payload:
        payload["diceBest"] = payload["rollBest"]
    payload.pop("rollBest", None)
    if "history" not in payload and "songHistory" in payload:
        payload["history"] = payload["songHistory"]
    payload.pop("songHistory", None)
    if isinstance(payload.get("history"), list):
        payload["history"] = [_migrate_legacy_grade(item) for item in payload["history"]]
    for key in _DERIVED_KEYS:
        payload.pop(key, None)
    return payload


MIGRATIONS: Dict[int, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    3: _migrate_v3_to_v4,
    4: _migrate_v4_to_v5,
}


def migrate(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Bring a raw payload up to ``SAVE_VERSION``; a missing version means 3."""

    out = dict(payload)
    raw_version = out.get("version")
    version = int(raw_version) if _is_number(raw_version) else LEGACY_VERSION
    if version < LEGACY_VERSION:
        logger.warning("Save version %r predates v%d; treating it as v%d", raw_version, LEGACY_VERSION, LEGACY_VERSION)
        version = LEGACY_VERSION
    if version > SAVE_VERSION:
        logger.warning("Save version %s is newer than supported version %s; reading known fields", version, SAVE_VERSION)
    while version < SAVE_VERSION:
        step = MIGRATIONS.get(version)
        if step is not None:
            out = step(out)
            logger.info("Migrated save from v%d to v%d", version, version + 1)
        version += 1
    out["version"] = max(version, SAVE_VERSION)
    return out


# --- field readers -------------------------------------------------------


def _read_int(payload: Mapping[str, Any], key: str, default: int, *, minimum: Optional[int] = None) -> int:
    value = payload.get(key)
    if not _is_number(value) or (minimum is not None and value < minimum):
        if key in payload:
            logger.warning("Discarding malformed save field %s=%r", key, value)
        return default
    return int(value)


def _read_bool(payload: Mapping[str, Any], key: str, default: bool) -> bool:
    value = payload.get(key)
    if isinstance(value, bool):
        return value
    if key in payload:
        logger.warning("Discarding malformed save field %s=%r", key, value)
    return default


def _read_stats(payload: Mapping[str, Any]) -> PerformerStats:
    values = {}
    for name in STAT_NAMES:
        raw = payload.get(name)
        if _is_number(raw):
            values[name] = clamp_stat(raw)
        else:
            if name in payload:
                logger.warning("Discarding malformed save field %s=%r", name, raw)
            values[name] = STARTING_STAT
    return PerformerStats(**values)


def _read_concept(payload: Mapping[str, Any]) -> SongConcept:
    genre = normalize_genre(payload.get("genre")) if isinstance(payload.get("genre"), str) else None
    theme = normalize_theme(payload.get("theme")) if isinstance(payload.get("theme"), str) else None
    name = payload.get("songName")
    if genre is None and "genre" in payload:
        logger.warning("Discarding unknown genre %r", payload.get("genre"))
    if theme is None and "theme" in payload:
        logger.warning("Discarding unknown theme %r", payload.get("theme"))
    concept = SongConcept()
    return SongConcept(
        genre=genre or concept.genre,
        theme=theme or concept.theme,
        name=normalize_song_name(name) if isinstance(name, str) else "",
    )


def _read_entry(raw: Any) -> Optional[DayEntry]:
    if not isinstance(raw, Mapping):
        return None
    gains_raw = raw.get("gains")
    gains = []
    if isinstance(gains_raw, Mapping):
        for name in STAT_NAMES:
            if _is_number(gains_raw.get(name)):
                gains.append((name, float(gains_raw[name])))
    gains.sort()
    triad = float(raw["triad"]) if _is_number(raw.get("triad")) else 0.0
    ref = raw.get("ref")
    try:
        return DayEntry(
            activity=str(raw.get("t")),
            gains=tuple(gains),
            triad=triad,
            song_ref=ref if isinstance(ref, str) else None,
        )
    except ValueError:
        return None


def _read_plan(payload: Mapping[str, Any]) -> WeekPlan:
    raw = payload.get("plan")
    if not isinstance(raw, list):
        if "plan" in payload:
            logger.warning("Discarding malformed week plan")
        return WeekPlan()
    entries: List[DayEntry] = []
    for item in raw:
        entry = _read_entry(item)
        if entry is None:
            logger.warning("Dropping malformed plan entry %r", item)
            continue
        if len(entries) >= DAYS_PER_WEEK:
            logger.warning("Dropping plan entries beyond the %d-day week", DAYS_PER_WEEK)
            break
        if entry.activity == "gig" and sum(1 for row in entries if row.activity == "gig") >= MAX_GIGS_PER_WEEK:
            logger.warning("Dropping gig entry beyond the weekly cap")
            continue
        entries.append(entry)
    return WeekPlan(entries=tuple(entries))


def _read_dice(payload: Mapping[str, Any]) -> DiceTable:
    raw = payload.get("diceBest")
    table = DiceTable()
    if not isinstance(raw, Mapping):
        return table
    for skill in SKILLS:
        cell = raw.get(skill)
        if not isinstance(cell, Mapping):
            continue
        faces, value = cell.get("faces"), cell.get("value")
        if not (_is_number(faces) and _is_number(value)):
            logger.warning("Discarding malformed dice result for %s", skill)
            continue
        try:
            table = table.record(skill, DiceResult(faces=int(faces), value=int(value)))
        except ValueError:
            logger.warning("Discarding out-of-range dice result for %s", skill)
    return table


def _read_gig(raw: Any) -> Optional[GigEvent]:
    if not isinstance(raw, Mapping):
        return None
    if not (_is_number(raw.get("week")) and _is_number(raw.get("moneyGain")) and _is_number(raw.get("fansGain"))):
        return None
    return GigEvent(
        week=int(raw["week"]),
        venue=str(raw.get("venue") or ""),
        money_gain=int(raw["moneyGain"]),
        fans_gain=int(raw["fansGain"]),
    )


def _string_list(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(str(item) for item in raw if isinstance(item, str))


def _read_record(raw: Any) -> Optional[ReleaseRecord]:
    if not isinstance(raw, Mapping):
        return None
    required = ("week", "score", "chartPos", "moneyGain", "fansGain")
    if not all(_is_number(raw.get(key)) for key in required):
        return None
    genre = normalize_genre(raw.get("genre")) if isinstance(raw.get("genre"), str) else None
    theme = normalize_theme(raw.get("theme")) if isinstance(raw.get("theme"), str) else None
    if genre is None or theme is None:
        return None
    grade = raw.get("grade")
    if grade not in GRADES:
        grade = grade_from_score(min(100.0, max(0.0, float(raw["score"]))))
        logger.warning("Regrading release %r from its score as %s", raw.get("songName"), grade)
    release_week = raw.get("releaseWeek")
    raw_gigs = raw.get("gigs") if isinstance(raw.get("gigs"), list) else []
    gigs = [_read_gig(item) for item in raw_gigs]
    try:
        return ReleaseRecord(
            week=int(raw["week"]),
            release_week=int(release_week) if _is_number(release_week) else int(raw["week"]),
            song_name=str(raw.get("songName") or ""),
            genre=genre,
            theme=theme,
            venue=str(raw.get("venue") or ""),
            score=float(raw["score"]),
            grade=grade,
            chart_pos=int(raw["chartPos"]),
            money_gain=int(raw["moneyGain"]),
            fans_gain=int(raw["fansGain"]),
            feedback=_string_list(raw.get("feedback")),
            review=str(raw.get("review") or ""),
            fan_comments=_string_list(raw.get("fanComments")),
            gigs=tuple(gig for gig in gigs if gig is not None),
        )
    except ValueError:
        return None


def _read_history(payload: Mapping[str, Any]) -> tuple[ReleaseRecord, ...]:
    raw = payload.get("history")
    if not isinstance(raw, list):
        if "history" in payload:
            logger.warning("Discarding malformed release history")
        return ()
    records: List[ReleaseRecord] = []
    for item in raw:
        record = _read_record(item)
        if record is None:
            logger.warning("Dropping malformed release record")
            continue
        records.append(record)
    return tuple(records)


def _read_resolutions(payload: Mapping[str, Any]) -> tuple[EventResolution, ...]:
    raw = payload.get("eventsResolved")
    rows: List[EventResolution] = []
    if isinstance(raw, Mapping):
        # Older saves kept an id -> choice map.
        for event_id, choice in raw.items():
            rows.append(EventResolution(event_id=str(event_id), choice_index=int(choice) if _is_number(choice) else None))
    elif isinstance(raw, list):
        for item in raw:
            if not isinstance(item, Mapping) or not isinstance(item.get("id"), str):
                continue
            choice = item.get("choice")
            rows.append(EventResolution(event_id=item["id"], choice_index=int(choice) if _is_number(choice) else None))
    return tuple(rows)


def from_payload(payload: Mapping[str, Any]) -> CareerState:
    data = migrate(payload)
    name = data.get("performerName")
    performer_name = name.strip() if isinstance(name, str) and name.strip() else DEFAULT_PERFORMER_NAME
    plan = _read_plan(data)
    finished_ready = _read_bool(data, "finishedReady", False)
    if finished_ready and plan.days_remaining > 0:
        logger.warning("Clearing finishedReady for a week with %d unused days", plan.days_remaining)
        finished_ready = False
    return CareerState(
        week=min(_read_int(data, "week", 1, minimum=1), SEASON_LENGTH + 1),
        money=_read_int(data, "money", 0),
        fans=_read_int(data, "fans", 0, minimum=0),
        stats=_read_stats(data),
        plan=plan,
        concept=_read_concept(data),
        concept_locked=_read_bool(data, "conceptLocked", False),
        finished_ready=finished_ready,
        dice=_read_dice(data),
        history=_read_history(data),
        performer_name=performer_name,
        vinyl_unlocked=_read_bool(data, "vinylUnlocked", False),
        calendar_seed=_read_int(data, "calendarSeed", 0, minimum=0),
        events_resolved=_read_resolutions(data),
    )


def load(raw: Optional[str]) -> Optional[CareerState]:
    """Parse a stored blob. ``None`` means there is no usable save."""

    if raw is None or not str(raw).strip():
        return None
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring unparseable save payload")
        return None
    if not isinstance(payload, dict):
        logger.warning("Ignoring save payload that is not an object")
        return None
    return from_payload(payload)
