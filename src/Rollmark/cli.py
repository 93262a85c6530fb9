"""
Command-line front end for the dice engine.

Examples:
  rollmark roll 2d6+3
  rollmark --seed 7 roll d20+5 --advantage --json
  rollmark check 15 --modifier 3
  echo "Attack: +7 to hit, 2d6+4 slashing" | rollmark scan
"""
from __future__ import annotations

import json
import sys

import click

from Rollmark.config import load_settings
from Rollmark.logging import setup_logging
from Rollmark.rules.engine import DiceRoller
from Rollmark.rules.errors import InvalidNotationError
from Rollmark.rules.notation import parse
from Rollmark.rules.types import CriticalFlag, RollResult
from Rollmark.text.scanner import annotate as annotate_text
from Rollmark.text.scanner import scan as scan_text


def format_roll(res: RollResult) -> str:
    rolls = ", ".join(str(o.value) if o.kept else f"~~{o.value}~~" for o in res.outcomes)
    suffix = ""
    if res.critical is CriticalFlag.SUCCESS:
        suffix = " (critical!)"
    elif res.critical is CriticalFlag.FUMBLE:
        suffix = " (fumble!)"
    return f"🎲 `{res.display_notation}` → rolls [{rolls}] = **{res.grand_total}**{suffix}"


def _read_text(text: str | None) -> str:
    return text if text is not None else sys.stdin.read()


@click.group()
@click.option("--seed", type=int, default=None, help="Seed the random source for repeatable rolls.")
@click.pass_context
def app(ctx: click.Context, seed: int | None) -> None:
    settings = load_settings()
    setup_logging(settings)
    if seed is not None:
        settings = settings.model_copy(update={"dice_rng_seed": seed})
    ctx.obj = DiceRoller.from_settings(settings)


@app.command()
@click.argument("notation")
@click.option("--advantage", is_flag=True, default=False, help="Roll 2d20 and keep the highest.")
@click.option("--disadvantage", is_flag=True, default=False, help="Roll 2d20 and keep the lowest.")
@click.option("--times", type=click.IntRange(min=1), default=1, show_default=True)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON payloads.")
@click.pass_obj
def roll(
    roller: DiceRoller,
    notation: str,
    advantage: bool,
    disadvantage: bool,
    times: int,
    as_json: bool,
) -> None:
    """Roll NOTATION, e.g. 2d6+3, 4d6kh3 or +5."""
    try:
        desc = parse(notation, max_dice=roller.max_dice)
    except InvalidNotationError as exc:
        raise click.BadParameter(str(exc), param_hint="NOTATION") from exc
    if (advantage or disadvantage) and not (desc.is_flat or desc.is_single_d20):
        raise click.BadParameter(
            "advantage/disadvantage only applies to a single d20", param_hint="NOTATION"
        )

    for _ in range(times):
        if advantage and not disadvantage:
            res = roller.roll_advantage(desc.modifier)
        elif disadvantage and not advantage:
            res = roller.roll_disadvantage(desc.modifier)
        else:
            res = roller.roll(notation)
        click.echo(json.dumps(res.as_payload()) if as_json else format_roll(res))


@app.command()
@click.argument("dc", type=int)
@click.option("--modifier", type=int, default=0, show_default=True)
@click.option("--advantage", is_flag=True, default=False)
@click.option("--disadvantage", is_flag=True, default=False)
@click.option("--json", "as_json", is_flag=True, default=False)
@click.pass_obj
def check(
    roller: DiceRoller,
    dc: int,
    modifier: int,
    advantage: bool,
    disadvantage: bool,
    as_json: bool,
) -> None:
    """Roll a d20 check against DC."""
    res = roller.roll_check(dc, modifier, advantage=advantage, disadvantage=disadvantage)
    if as_json:
        click.echo(json.dumps({"dc": res.dc, "success": res.success, "roll": res.roll.as_payload()}))
        return
    verdict = "success" if res.success else "failure"
    click.echo(f"{format_roll(res.roll)} vs DC {res.dc}: {verdict}")


@app.command()
@click.argument("text", required=False)
@click.option("--json", "as_json", is_flag=True, default=False)
def scan(text: str | None, as_json: bool) -> None:
    """List rollable tokens in TEXT (or stdin)."""
    tokens = scan_text(_read_text(text))
    for t in tokens:
        if as_json:
            click.echo(
                json.dumps(
                    {
                        "matched_text": t.matched_text,
                        "notation": t.notation,
                        "kind": t.kind.value,
                        "span": list(t.span),
                        "dc": t.dc,
                    }
                )
            )
        else:
            click.echo(f"{t.span[0]}-{t.span[1]}\t{t.kind.value}\t{t.notation}\t{t.matched_text}")


@app.command()
@click.argument("text", required=False)
def annotate(text: str | None) -> None:
    """Print TEXT (or stdin) with rollable tokens wrapped in marker spans."""
    click.echo(annotate_text(_read_text(text)), nl=False)


def main() -> None:  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
