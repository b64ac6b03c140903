"""Upline chain planning.

When user U registers with direct referrer R, U's upline is R at level 1 followed by
R's own upline shifted down one level. R's upline is already fully materialized (it
was built the same way when R registered), so this is a single pass over at most
MAX_REFERRAL_DEPTH - 1 rows, never a recursive walk.
"""

from collections.abc import Iterable

from src.cw_common.errors import SelfReferralError
from src.cw_referral.domain.constants import MAX_REFERRAL_DEPTH
from src.cw_referral.domain.models import Referral


def plan_upline_edges(
    referrer_id: int,
    new_user_id: int,
    referrer_upline: Iterable[Referral],
) -> list[tuple[int, int]]:
    """Return the (referrer_id, level) edges to insert for `new_user_id`, level ascending.

    `referrer_upline` is every edge whose referred_id is `referrer_id`.
    """
    if referrer_id == new_user_id:
        raise SelfReferralError()

    edges = [(referrer_id, 1)]
    seen = {referrer_id}
    for edge in sorted(referrer_upline, key=lambda e: e.level):
        level = edge.level + 1
        if level > MAX_REFERRAL_DEPTH:
            break
        # An ancestor can appear only once; the new user can never be its own ancestor
        if edge.referrer_id in seen or edge.referrer_id == new_user_id:
            continue
        seen.add(edge.referrer_id)
        edges.append((edge.referrer_id, level))
    return edges
