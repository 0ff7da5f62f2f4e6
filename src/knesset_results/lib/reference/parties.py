"""Party Identity Resolver — ballot letter + round to display name.

Vote totals are keyed by ballot letter no matter which party held the
letter in a given round, so this lookup is used for presentation only.
"""

from knesset_results.lib.reference.types import PartyInfo


def resolve_party_name(
    parties: dict[str, PartyInfo],
    letter: str,
    round_id: int | None = None,
    *,
    english: bool = False,
) -> str:
    """Return the display name a ballot letter carried in a round.

    Args:
        parties: Party table keyed by ballot letter.
        letter: The ballot letter (vote column key).
        round_id: Round to resolve for; None returns the default name.
        english: Return the English name instead of the Hebrew one.

    Returns:
        The per-round alias name when the party defines one for the round,
        otherwise the default name.  Letters missing from the table resolve
        to themselves.
    """
    party = parties.get(letter)
    if party is None:
        return letter

    if round_id is not None and party.aliasRounds and round_id in party.aliasRounds:
        alias = party.aliasRounds[round_id]
        return alias.nameEn if english else alias.nameHe

    return party.nameEn if english else party.nameHe


def parties_in_round(parties: dict[str, PartyInfo], round_id: int) -> list[PartyInfo]:
    """List the parties whose letter appeared on the ballot in a round, by seats won."""
    running = [p for p in parties.values() if round_id in p.seats]
    return sorted(running, key=lambda p: (-p.seats[round_id], p.letter))
