"""
Market odds line resolver.

Turns one raw odds payload for one fixture into a canonical OddsLineTable:
the main over/under line and its prices, the fixed 1.5 / 2.5 / 3.5
reference slots, every surviving line, plus the Asian handicap and 1X2
prices when the feed carries them.

Payload shapes accepted:
    live       {"fixture": {...}, "odds": [{"id": 36, "values": [...]}, ...]}
               values: {"value": "Over", "odd": "1.85", "handicap": "2.5",
                        "main": true, "suspended": false}
    pre-match  {"bookmakers": [{"id": 8, "name": "...", "bets": [...]}]}
               values: {"value": "Over 2.5", "odd": "1.85"}
    either one wrapped in a list (the provider's ``response`` array).

Main-line selection:
    1. A line carrying an explicit main=true marker wins (lowest such line).
    2. Otherwise the first line in 2.5 → 2.25 → 2.0 → 1.75 → 1.5 quoted on
       both sides.
    3. Otherwise no main line, though all_lines may still be populated.

Suspended values and unparseable lines / prices are dropped before any of
the above. Nothing here raises on malformed input.
"""
import logging
import math
import re
from typing import Any, Iterable, Optional

from football_signal.config import (
    LIVE_BET_ASIAN_HANDICAP,
    LIVE_BET_FULLTIME_RESULT,
    LIVE_BET_MATCH_GOALS,
    LIVE_BET_OVER_UNDER_LINE,
    ODDS_FALLBACK_LINES,
    ODDS_REFERENCE_LINES,
    ODDS_TREND_EPSILON,
    PREFERRED_BOOKMAKERS,
    PREMATCH_BET_ASIAN_HANDICAP,
    PREMATCH_BET_MATCH_WINNER,
    PREMATCH_BET_OVER_UNDER,
)
from football_signal.state import FetchStatus, MarketSnapshot, OddsLine, OddsLineTable

log = logging.getLogger("football_signal.odds_lines")

LIVE_BOOKMAKER = "live"

_NUMBER_RE = re.compile(r"[-+]?\d+(?:\.\d+)?")


# ═══════════════════════════════════════════════════════════════════════
#  Parsing helpers
# ═══════════════════════════════════════════════════════════════════════

def _to_float(raw: Any) -> Optional[float]:
    """Float from a provider number / string, None if absent or garbage."""
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(str(raw).strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _to_price(raw: Any) -> Optional[float]:
    """Decimal odds; zero or negative prices count as missing."""
    value = _to_float(raw)
    return value if value is not None and value > 0 else None


def _active_values(bet: Optional[dict]) -> list[dict]:
    """Non-suspended dict values of one bet."""
    if not bet:
        return []
    values = bet.get("values") or []
    kept = []
    for v in values:
        if not isinstance(v, dict):
            continue
        if v.get("suspended"):
            log.debug("dropping suspended value %s %s", v.get("value"), v.get("handicap"))
            continue
        kept.append(v)
    return kept


def _find_bet(bets: Iterable[Any], bet_id: int) -> Optional[dict]:
    for bet in bets:
        if isinstance(bet, dict) and bet.get("id") == bet_id:
            return bet
    return None


class _LineQuote:
    """Mutable accumulator for one over/under line while parsing."""
    __slots__ = ("over", "under", "marked_main")

    def __init__(self) -> None:
        self.over: Optional[float] = None
        self.under: Optional[float] = None
        self.marked_main = False


def _collect_live_lines(values: list[dict]) -> dict[float, _LineQuote]:
    lines: dict[float, _LineQuote] = {}
    for v in values:
        line = _to_float(v.get("handicap"))
        price = _to_price(v.get("odd"))
        if line is None or price is None:
            log.debug("dropping unparseable O/U value %r", v)
            continue

        side = v.get("value")
        if side not in ("Over", "Under"):
            log.debug("dropping non over/under value %r", v)
            continue

        quote = lines.setdefault(line, _LineQuote())
        if side == "Over":
            quote.over = price
        else:
            quote.under = price
        if v.get("main"):
            quote.marked_main = True
    return lines


def _collect_prematch_lines(values: list[dict]) -> dict[float, _LineQuote]:
    """Pre-match values carry the line in their label: "Over 2.5"."""
    lines: dict[float, _LineQuote] = {}
    for v in values:
        label = str(v.get("value") or "").strip()
        side, _, line_text = label.partition(" ")
        line = _to_float(line_text)
        price = _to_price(v.get("odd"))
        if side.lower() not in ("over", "under") or line is None or price is None:
            log.debug("dropping unparseable pre-match O/U value %r", v)
            continue

        quote = lines.setdefault(line, _LineQuote())
        if side.lower() == "over":
            quote.over = price
        else:
            quote.under = price
    return lines


def _pick_main_line(lines: dict[float, _LineQuote]) -> Optional[float]:
    marked = sorted(line for line, q in lines.items() if q.marked_main)
    if marked:
        return marked[0]
    for candidate in ODDS_FALLBACK_LINES:
        quote = lines.get(candidate)
        if quote is not None and quote.over is not None and quote.under is not None:
            return candidate
    return None


# ═══════════════════════════════════════════════════════════════════════
#  Asian handicap + 1X2
# ═══════════════════════════════════════════════════════════════════════

def _live_asian_handicap(values: list[dict]) -> tuple[Optional[float], Optional[float], Optional[float]]:
    """Main-marked Home/Away pair, else the first two surviving values."""
    main = [v for v in values if v.get("main")]
    pair = main if len(main) >= 2 else values[:2]

    home = next((v for v in pair if v.get("value") == "Home"), None)
    away = next((v for v in pair if v.get("value") == "Away"), None)
    if home is None or away is None:
        return None, None, None
    return _to_float(home.get("handicap")), _to_price(home.get("odd")), _to_price(away.get("odd"))


def _prematch_asian_handicap(values: list[dict]) -> tuple[Optional[float], Optional[float], Optional[float]]:
    """Pre-match labels read "Home -1" / "Away -1"."""
    home = next((v for v in values if "Home" in str(v.get("value", ""))), None)
    away = next((v for v in values if "Away" in str(v.get("value", ""))), None)
    if home is None or away is None:
        return None, None, None
    match = _NUMBER_RE.search(str(home.get("value")))
    line = _to_float(match.group(0)) if match else None
    return line, _to_price(home.get("odd")), _to_price(away.get("odd"))


def _fulltime_result(values: list[dict]) -> tuple[Optional[float], Optional[float], Optional[float]]:
    prices = {}
    for side in ("Home", "Draw", "Away"):
        found = next((v for v in values if v.get("value") == side), None)
        prices[side] = _to_price(found.get("odd")) if found else None
    return prices["Home"], prices["Draw"], prices["Away"]


# ═══════════════════════════════════════════════════════════════════════
#  Table assembly
# ═══════════════════════════════════════════════════════════════════════

def _build_table(
    lines: dict[float, _LineQuote],
    ah: tuple[Optional[float], Optional[float], Optional[float]],
    ft: tuple[Optional[float], Optional[float], Optional[float]],
    bookmaker: str,
    is_live: bool,
) -> OddsLineTable:
    main_line = _pick_main_line(lines)
    main_quote = lines.get(main_line) if main_line is not None else None

    all_lines = tuple(
        OddsLine(line=line, over=q.over, under=q.under, is_main=line == main_line)
        for line, q in sorted(lines.items())
        if q.over is not None or q.under is not None
    )

    refs: dict[str, Optional[float]] = {}
    for ref in ODDS_REFERENCE_LINES:
        quote = lines.get(ref)
        suffix = str(ref).replace(".", "_")
        refs[f"over_{suffix}"] = quote.over if quote else None
        refs[f"under_{suffix}"] = quote.under if quote else None

    ah_line, ah_home, ah_away = ah
    win_home, win_draw, win_away = ft

    resolved = (
        main_line is not None
        or any(price is not None for price in refs.values())
        or bool(all_lines)
        or ah_line is not None
        or win_home is not None
    )

    return OddsLineTable(
        main_line=main_line,
        main_over=main_quote.over if main_quote else None,
        main_under=main_quote.under if main_quote else None,
        all_lines=all_lines,
        asian_handicap_line=ah_line,
        asian_handicap_home=ah_home,
        asian_handicap_away=ah_away,
        win_home=win_home,
        win_draw=win_draw,
        win_away=win_away,
        bookmaker=bookmaker,
        is_live=is_live,
        fetch_status=FetchStatus.SUCCESS if resolved else FetchStatus.EMPTY,
        **refs,
    )


def _resolve_live(odds: list) -> OddsLineTable:
    ou_bet = _find_bet(odds, LIVE_BET_OVER_UNDER_LINE) or _find_bet(odds, LIVE_BET_MATCH_GOALS)
    lines = _collect_live_lines(_active_values(ou_bet))
    ah = _live_asian_handicap(_active_values(_find_bet(odds, LIVE_BET_ASIAN_HANDICAP)))
    ft = _fulltime_result(_active_values(_find_bet(odds, LIVE_BET_FULLTIME_RESULT)))
    return _build_table(lines, ah, ft, bookmaker=LIVE_BOOKMAKER, is_live=True)


def _select_bookmaker(bookmakers: list) -> Optional[dict]:
    with_bets = [b for b in bookmakers if isinstance(b, dict) and b.get("bets")]
    for preferred in PREFERRED_BOOKMAKERS:
        for b in with_bets:
            if b.get("id") == preferred:
                return b
    return with_bets[0] if with_bets else None


def _resolve_prematch(bookmakers: list) -> OddsLineTable:
    bookmaker = _select_bookmaker(bookmakers)
    if bookmaker is None:
        return OddsLineTable(is_live=False)

    bets = bookmaker.get("bets") or []
    lines = _collect_prematch_lines(_active_values(_find_bet(bets, PREMATCH_BET_OVER_UNDER)))
    ah = _prematch_asian_handicap(_active_values(_find_bet(bets, PREMATCH_BET_ASIAN_HANDICAP)))
    ft = _fulltime_result(_active_values(_find_bet(bets, PREMATCH_BET_MATCH_WINNER)))
    return _build_table(lines, ah, ft, bookmaker=str(bookmaker.get("name") or ""), is_live=False)


def resolve_odds_line(payload: Any) -> OddsLineTable:
    """Resolve a raw odds payload into an OddsLineTable.

    Args:
        payload: Live or pre-match odds object, a list wrapping one, or
                 anything else (treated as empty).

    Returns:
        A table whose ``fetch_status`` is SUCCESS when any price resolved,
        EMPTY otherwise. EMPTY means "no market confirmation", not an error.
    """
    if isinstance(payload, list):
        payload = payload[0] if payload else None
    if not isinstance(payload, dict):
        return OddsLineTable()

    odds = payload.get("odds")
    if isinstance(odds, list) and odds:
        table = _resolve_live(odds)
    else:
        bookmakers = payload.get("bookmakers")
        if isinstance(bookmakers, list) and bookmakers:
            table = _resolve_prematch(bookmakers)
        else:
            return OddsLineTable()

    fixture = payload.get("fixture")
    fixture_id = fixture.get("id") if isinstance(fixture, dict) else None
    log.debug(
        "fixture=%s odds %s main=%s lines=%d ah=%s",
        fixture_id, table.fetch_status.value, table.main_line,
        len(table.all_lines), table.asian_handicap_line,
    )
    return table


# ═══════════════════════════════════════════════════════════════════════
#  Consumers: trends + MarketSnapshot
# ═══════════════════════════════════════════════════════════════════════

def price_trend(current: Optional[float], previous: Optional[float]) -> str:
    """"up" / "down" / "stable" against the previous tick (±0.02)."""
    if current is None or previous is None:
        return "stable"
    if current < previous - ODDS_TREND_EPSILON:
        return "down"
    if current > previous + ODDS_TREND_EPSILON:
        return "up"
    return "stable"


def _ou_quote(table: OddsLineTable) -> tuple[Optional[float], Optional[float], Optional[float]]:
    """(line, over, under): main line, then 2.5 → 1.5 → 3.5 slots, then the lowest line."""
    if table.main_line is not None:
        return table.main_line, table.main_over, table.main_under
    for line in (2.5, 1.5, 3.5):
        over, under = table.reference(line)
        if over is not None or under is not None:
            return line, over, under
    if table.all_lines:
        first = table.all_lines[0]
        return first.line, first.over, first.under
    return None, None, None


def _quote_at(table: OddsLineTable, line: Optional[float]) -> tuple[Optional[float], Optional[float]]:
    """(over, under) quoted on exactly this line, or (None, None)."""
    if line is None:
        return None, None
    for entry in table.all_lines:
        if entry.line == line:
            return entry.over, entry.under
    return None, None


def market_snapshot_from_table(
    table: OddsLineTable,
    previous: Optional[OddsLineTable] = None,
) -> Optional[MarketSnapshot]:
    """MarketSnapshot for the signal path, or None for an EMPTY table.

    Args:
        table:    Current resolved table.
        previous: Table from the previous poll, source of the *_prev prices.
                  Only prices on the same line count; a moved line
                  leaves them None.
    """
    if table.fetch_status == FetchStatus.EMPTY:
        return None

    line, over, under = _ou_quote(table)
    prev_over = prev_under = prev_ah_line = None
    if previous is not None and previous.fetch_status == FetchStatus.SUCCESS:
        prev_over, prev_under = _quote_at(previous, line)
        prev_ah_line = previous.asian_handicap_line

    return MarketSnapshot(
        over_odds=over,
        under_odds=under,
        ou_line=line,
        ah_line=table.asian_handicap_line,
        ah_home=table.asian_handicap_home,
        ah_away=table.asian_handicap_away,
        win_home=table.win_home,
        win_draw=table.win_draw,
        win_away=table.win_away,
        over_odds_prev=prev_over,
        under_odds_prev=prev_under,
        ah_line_prev=prev_ah_line,
        is_live=table.is_live,
        bookmaker=table.bookmaker,
    )
