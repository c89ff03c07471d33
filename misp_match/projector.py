"""Reshapes a matched MISP event into the alert returned to Wazuh."""

import asyncio
import logging
from collections.abc import Awaitable, Mapping
from typing import Optional, TypeVar

from misp_match.errors import ProjectionError
from misp_match.models import MISPEvent, MISPObject, OutboundAlert, SearchResponse

logger = logging.getLogger("misp_match.projector")

K = TypeVar("K")
V = TypeVar("V")

MALWARE_ANALYSIS_OBJECT = "malware-analysis"
MALWARE_OBJECT = "malware"

# Relations of the malware object forwarded to Wazuh
MALWARE_FIELDS = frozenset({"name", "malware_type"})


def extract_object_info(
    obj: MISPObject, relations: Optional[frozenset[str]] = None
) -> dict[str, str]:
    """
    Map object relations to values for the wanted attributes.

    Args:
        obj: MISP object to read
        relations: Relations to keep (None = keep all)

    Returns:
        relation -> value, first occurrence wins on duplicates
    """
    info: dict[str, str] = {}
    for attr in obj.attributes:
        if relations is not None and attr.object_relation not in relations:
            continue
        info.setdefault(attr.object_relation, attr.value)
    return info


async def join_all(tasks: Mapping[K, Awaitable[V]]) -> dict[K, V]:
    """
    Wait for every task and return the results keyed by origin.

    Completion order does not matter. If any task fails the exception
    propagates and no results are returned.
    """
    keys = list(tasks)
    results = await asyncio.gather(*(tasks[k] for k in keys))
    return dict(zip(keys, results))


def _require_object(event: MISPEvent, name: str) -> MISPObject:
    obj = event.get_object(name)
    if obj is None:
        raise ProjectionError(f"event doesn't contain any {name} object")
    return obj


async def build_alert(result: SearchResponse) -> OutboundAlert:
    """
    Generate a minimal alert describing the first matched event.

    Args:
        result: Non-empty MISP search response

    Returns:
        Alert with the event's identity fields plus "Malware_analysis" and
        "Malware" attribute maps

    Raises:
        ProjectionError: If the response is empty or the event lacks a
            malware-analysis or malware object
    """
    if result.is_empty():
        raise ProjectionError("search response contains no events")

    event = result.first()

    analysis_obj = _require_object(event, MALWARE_ANALYSIS_OBJECT)
    malware_obj = _require_object(event, MALWARE_OBJECT)

    loop = asyncio.get_running_loop()
    extracted = await join_all(
        {
            "Malware_analysis": loop.run_in_executor(None, extract_object_info, analysis_obj),
            "Malware": loop.run_in_executor(
                None, extract_object_info, malware_obj, MALWARE_FIELDS
            ),
        }
    )

    alert: OutboundAlert = {
        "info": event.info,
        "date": event.date,
        "id": event.id,
        "uuid": event.uuid,
        "threat_level": event.threat_level_id,
    }
    alert.update(extracted)

    logger.debug(
        f"Built alert for event {event.id}: "
        f"{len(extracted['Malware_analysis'])} analysis fields, "
        f"{len(extracted['Malware'])} malware fields"
    )
    return alert
