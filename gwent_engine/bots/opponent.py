"""
Heuristic Opponent - The Opponent Decision Engine.

Per opponent turn the bot:
1. Captures a BoardSnapshot (it never reads the live zones)
2. Decides whether to pass
3. Collects CardOptions from the ability advisors
4. Plays the best-scored option, breaking ties uniformly at random
5. Falls back to a prioritized-random card when no advisor proposed one

The bot does NOT:
- Look ahead (no search over future turns)
- Track the player's hand or deck
- Use the leader card
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING
import logging
import random

from ..catalog.vocabulary import Ability
from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import legal_actions as generate_legal_actions
from ..engine_core.reducer import needs_target_row
from ..engine_core.state import Card, ROW_KINDS, Side
from .advisors import ADVISORS, Advisor, AdvisorScores, collect_options
from .policy import BotDecision, BotPolicy, CardOption
from .snapshot import BoardSnapshot

if TYPE_CHECKING:
    from ..config import MatchSettings
    from ..engine_core.state import MatchState

logger = logging.getLogger(__name__)

# Fallback preference when no advisor proposed anything.
FALLBACK_TIERS: list[frozenset[Ability | None]] = [
    frozenset({Ability.BOND, Ability.MORALE, Ability.MUSTER, Ability.MUSTER_PLUS}),
    frozenset({None}),
    frozenset({Ability.MORPH, Ability.MARDROEME, Ability.HORN}),
    frozenset({Ability.SCORCH_ROW, Ability.AVENGER, Ability.MEDIC}),
]


def should_pass(snapshot: BoardSnapshot) -> bool:
    """
    Pass if the hand is empty, or if the enemy has passed and we are
    already ahead (or level with draw superiority).
    """
    if not snapshot.hand:
        return True
    if snapshot.enemy_passed and (
        snapshot.own_total > snapshot.enemy_total
        or (snapshot.own_total == snapshot.enemy_total and snapshot.can_win_draws)
    ):
        return True
    return False


@dataclass
class HeuristicOpponent(BotPolicy):
    """
    Opponent with ability advisors and a prioritized-random fallback.

    Usage:
        bot = HeuristicOpponent(side=Side.OPPONENT, rng=random.Random(7))
        decision = bot.select_action(state, settings, legal_actions)
        print(decision.explanation)
    """
    side: Side = Side.OPPONENT
    scores: AdvisorScores = None  # type: ignore
    rng: random.Random = None  # type: ignore
    advisors: list[Advisor] = None  # type: ignore

    def __post_init__(self):
        if self.scores is None:
            self.scores = AdvisorScores()
        if self.rng is None:
            self.rng = random.Random()
        if self.advisors is None:
            self.advisors = list(ADVISORS)

    def select_action(
        self,
        state: MatchState,
        settings: MatchSettings,
        legal_actions: list[Action],
    ) -> BotDecision:
        """
        Select the opponent's action for this turn.

        Redraw phases are answered by finishing immediately.
        """
        if not legal_actions:
            raise ValueError("No legal actions available")

        for action in legal_actions:
            if action.action_type == ActionType.FINISH_REDRAW:
                return BotDecision(action=action, explanation="Keep the opening hand", evaluated_actions=1)

        snapshot = BoardSnapshot.capture(state, self.side, settings)

        if should_pass(snapshot):
            reason = "Hand is empty" if not snapshot.hand else "Enemy passed and we are ahead"
            logger.info("Opponent passes: %s", reason)
            return BotDecision(
                action=Action.pass_round(self.side),
                explanation=reason,
                evaluated_actions=len(legal_actions),
                evaluation_details={"options": [], "passed": True},
            )

        options = collect_options(snapshot, self.scores, self.rng, self.advisors)
        if options:
            return self._choose_best(options)
        return self._choose_fallback(snapshot)

    def decide(self, state: MatchState, settings: MatchSettings) -> BotDecision:
        """Generate the legal actions and select one."""
        return self.select_action(state, settings, generate_legal_actions(state, self.side, settings))

    def _choose_best(self, options: list[CardOption]) -> BotDecision:
        best_score = max(o.score for o in options)
        best = [o for o in options if o.score == best_score]
        chosen = self.rng.choice(best)
        logger.info("Opponent selected [%s] | Score %d | %s", chosen.card.name, chosen.score, chosen.reason)

        return BotDecision(
            action=self._to_action(chosen),
            explanation=chosen.reason,
            confidence=1.0 / len(best),
            evaluated_actions=len(options),
            best_score=best_score,
            evaluation_details={"options": [o.describe() for o in options]},
        )

    def _choose_fallback(self, snapshot: BoardSnapshot) -> BotDecision:
        """Pick uniformly at random within the first non-empty fallback tier."""
        candidates: list[Card] = []
        tier_index = None
        for index, tier in enumerate(FALLBACK_TIERS):
            candidates = [c for c in snapshot.hand if c.ability in tier]
            if candidates:
                tier_index = index
                break
        if not candidates:
            candidates = list(snapshot.hand)

        card = self.rng.choice(candidates)
        row = self.rng.choice(ROW_KINDS) if needs_target_row(card) else None
        option = CardOption(card, 0, "Random card", target_row=row)
        logger.info("Opponent selected random card: [%s]", card.name)

        return BotDecision(
            action=self._to_action(option),
            explanation=option.reason,
            confidence=1.0 / len(candidates),
            evaluated_actions=len(candidates),
            evaluation_details={"options": [], "fallback_tier": tier_index},
        )

    def _to_action(self, option: CardOption) -> Action:
        """Turn an option into an action; row-targeted specials are two-step plays."""
        card_id = option.card.instance_id
        if option.target_row is not None and needs_target_row(option.card):
            return Action.play_on_row(self.side, card_id, option.target_row)
        if needs_target_row(option.card):
            return Action.play_on_row(self.side, card_id, self.rng.choice(ROW_KINDS))
        if option.target_card is not None:
            return Action.play(self.side, card_id, option.target_card.instance_id, self.side)
        return Action.play(self.side, card_id)
