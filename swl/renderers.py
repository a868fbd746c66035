"""Renderers that convert resolution records into text output.

The TextRenderer produces terminal-friendly lines for the command-line
tools. Any other front end can consume the same record types.
"""

from __future__ import annotations

from swl.records import DefenseRecord, Outcome, ResolutionRecord, RolledDie, StageRecord

# One-letter abbreviations keep a pool readable on one line: "R:H B:- W:C".
FACE_MARKS = {"blank": "-", "hit": "H", "crit": "C", "surge": "S", "block": "B"}


class TextRenderer:
    """Renders a ResolutionRecord (and its Outcome) to text lines.

    Each render_* method returns a list of strings, one per line.
    """

    def render_outcome(self, outcome: Outcome) -> list[str]:
        lines: list[str] = []
        if outcome.record:
            lines.extend(self.render_resolution(outcome.record))
        lines.append(
            f"wounds: {outcome.total_wounds} total"
            f" ({outcome.main_wounds} target, {outcome.guardian_wounds} guardian, before Pierce)"
        )
        if outcome.reflected_wounds or outcome.guardian_reflected_wounds:
            lines.append(f"reflected: {outcome.reflected_wounds} + {outcome.guardian_reflected_wounds} from guardian")
        lines.append(f"suppression: {outcome.suppression}")
        return lines

    def render_resolution(self, record: ResolutionRecord) -> list[str]:
        lines = [f"{record.context} attack"]
        for stage in record.stages:
            lines.extend(self.render_stage(stage))
        if record.defense:
            lines.extend(self.render_defense(record.defense))
        if record.guardian:
            lines.extend(self.render_defense(record.guardian))
        return lines

    def render_stage(self, record: StageRecord) -> list[str]:
        lines = [f"{record.stage}. {record.name}: {self.render_dice(record.dice)}"]
        lines.extend(f"    {note}" for note in record.notes)
        return lines

    def render_defense(self, record: DefenseRecord) -> list[str]:
        line = f"  {record.target} rolls {len(record.dice)}: {self.render_dice(record.dice)} = {record.blocks} blocks"
        if record.reroll:
            line += f" (rerolled by {record.reroll})"
        lines = [line]
        if record.reflected:
            lines.append(f"    reflects {record.reflected}")
        return lines

    def render_dice(self, dice: list[RolledDie]) -> str:
        return " ".join(f"{d.color[0].upper()}:{FACE_MARKS[d.face]}" for d in dice) or "(none)"
