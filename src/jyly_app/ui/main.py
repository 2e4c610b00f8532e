from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import flet as ft

from jyly_app.app.controller import GameController, create_controller
from jyly_app.domain import stats
from jyly_app.domain.engine import distance_for
from jyly_app.domain.models import GAME_LENGTHS, Game, GameMode
from jyly_app.infra.storage import ConfigStore
from jyly_app.ui.formatting import format_played_at, format_points, format_progress
from jyly_app.ui.selection import HitSelection

PANEL_WIDTH = 720
MAX_PLAYERS = 8
MAX_NAME_LENGTH = 20
HIT_CONFIRM_DELAY = 0.5
PODIUM_COLORS = ("#fbc02d", "#9e9e9e", "#ef6c00")


def _button(  # type: ignore[no-untyped-def]
    label: str, on_click, disabled: bool = False
) -> ft.Control:
    button_cls = getattr(ft, "Button", None)
    if button_cls is not None:
        for builder in (
            lambda: button_cls(text=label, on_click=on_click, disabled=disabled),
            lambda: button_cls(label, on_click=on_click, disabled=disabled),
        ):
            try:
                return builder()
            except TypeError:
                continue

    elevated_cls = getattr(ft, "ElevatedButton", None)
    if elevated_cls is None:
        raise RuntimeError("No compatible button control found in flet module")
    try:
        return elevated_cls(text=label, on_click=on_click, disabled=disabled)
    except TypeError:
        return elevated_cls(label, on_click=on_click, disabled=disabled)


def _center_alignment() -> Any:
    alignment_module = getattr(ft, "alignment", None)
    if alignment_module is not None and hasattr(alignment_module, "center"):
        return alignment_module.center
    return ft.Alignment(0, 0)


def _panel(*controls: ft.Control, title: str | None = None) -> ft.Control:
    content: list[ft.Control] = []
    if title:
        content.append(ft.Text(title, size=32, text_align=ft.TextAlign.CENTER))
    content.extend(controls)

    return ft.Container(
        width=PANEL_WIDTH,
        padding=20,
        border_radius=20,
        bgcolor=ft.Colors.with_opacity(0.08, ft.Colors.WHITE),
        content=ft.Column(
            controls=content,
            spacing=14,
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            tight=True,
        ),
    )


def _stat_tile(value: object, label: str) -> ft.Control:
    return ft.Container(
        padding=10,
        border_radius=10,
        bgcolor=ft.Colors.with_opacity(0.06, ft.Colors.WHITE),
        alignment=_center_alignment(),
        content=ft.Column(
            [ft.Text(str(value), size=24, weight=ft.FontWeight.BOLD), ft.Text(label, size=12)],
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            tight=True,
        ),
        col={"xs": 6, "md": 3},
    )


def _game_stats_row(game: Game) -> ft.Control:
    summary = stats.game_summary(game)
    return ft.ResponsiveRow(
        [
            _stat_tile(summary.player_count, "Pelaajaa"),
            _stat_tile(summary.rounds_played, "Kierrosta"),
            _stat_tile(summary.average_score, "Keskiarvo"),
            _stat_tile(summary.best_round, "Paras kierros"),
        ]
    )


def run_flet_app() -> None:
    run_fn = getattr(ft, "run", None)
    if callable(run_fn):
        run_fn(app_main)
        return

    app_fn = getattr(ft, "app", None)
    if callable(app_fn):
        app_fn(target=app_main)
        return

    raise RuntimeError("Flet module has no run() or app() entrypoint")


def app_main(page: ft.Page) -> None:
    page.title = "JYLY"
    page.horizontal_alignment = ft.CrossAxisAlignment.CENTER
    page.theme_mode = ft.ThemeMode.DARK
    page.scroll = ft.ScrollMode.AUTO
    page.padding = 24

    data_dir = Path("./appdata")
    data_dir.mkdir(exist_ok=True)

    config = ConfigStore(data_dir / "config.ini")
    controller = create_controller(data_dir)
    mount_views(page, controller, config)


def mount_views(page: ft.Page, controller: GameController, config: ConfigStore) -> None:
    feedback = ft.Text(color=ft.Colors.RED_300)
    selection = HitSelection()
    setup_names: list[str] = config.roster() or [""]
    setup_length = config.max_rounds()

    def render(_: GameController | None = None) -> None:
        page.clean()
        feedback.value = ""
        mode = controller.state.mode
        has_game = controller.state.current_game is not None
        if has_game and mode == GameMode.PLAYING and not controller.is_game_complete():
            show_game()
            page.update()
            return

        selection.cancel()
        if has_game and mode in (GameMode.PLAYING, GameMode.COMPLETED):
            show_completed()
        elif mode == GameMode.HISTORY:
            show_history()
        else:
            show_setup()
        page.update()

    def show_setup() -> None:
        names = setup_names

        def on_name_change(event: ft.ControlEvent, row_idx: int) -> None:
            names[row_idx] = event.control.value or ""

        def add_player(_: ft.ControlEvent) -> None:
            if len(names) < MAX_PLAYERS:
                names.append("")
                render()

        def remove_player(row_idx: int) -> None:
            if len(names) > 1:
                names.pop(row_idx)
                render()

        def select_saved(name: str) -> None:
            empty = next((idx for idx, value in enumerate(names) if not value.strip()), None)
            if empty is not None:
                names[empty] = name
            elif len(names) < MAX_PLAYERS:
                names.append(name)
            render()

        def choose_length(length: int) -> None:
            nonlocal setup_length
            setup_length = length
            render()

        def on_start(_: ft.ControlEvent) -> None:
            valid = [name for name in names if name.strip()]
            if not valid:
                feedback.value = "Lisää vähintään yksi pelaaja"
                page.update()
                return
            config.save_setup(valid, setup_length)
            controller.create_game(valid, setup_length)

        rows: list[ft.Control] = []
        for idx, name in enumerate(names):
            field = ft.TextField(
                value=name,
                hint_text=f"Pelaaja {idx + 1}",
                max_length=MAX_NAME_LENGTH,
                expand=True,
                on_change=lambda event, row_idx=idx: on_name_change(event, row_idx),
            )
            controls: list[ft.Control] = [field]
            if len(names) > 1:
                controls.append(_button("×", lambda _, row_idx=idx: remove_player(row_idx)))
            rows.append(ft.Row(controls))

        entered = {name.strip().lower() for name in names if name.strip()}
        available = [
            saved for saved in controller.saved_players() if saved.name.lower() not in entered
        ]
        saved_list: list[ft.Control] = []
        if available:
            saved_list.append(ft.Text(f"Tallennetut pelaajat ({len(available)})", size=14))
            saved_list.append(
                ft.Column(
                    [
                        ft.ListTile(
                            title=ft.Text(saved.name),
                            trailing=ft.Text(f"{saved.games_played} peliä", size=12),
                            on_click=lambda _, name=saved.name: select_saved(name),
                        )
                        for saved in available
                    ],
                    height=min(200, 56 * len(available)),
                    scroll=ft.ScrollMode.AUTO,
                )
            )

        length_buttons = [
            _button(
                f"{length} kierrosta{' ✓' if length == setup_length else ''}",
                lambda _, value=length: choose_length(value),
            )
            for length in GAME_LENGTHS
        ]

        page.add(
            _panel(
                ft.Text("Frisbeegolf Puttipeli"),
                *rows,
                _button("+ Lisää pelaaja", add_player, disabled=len(names) >= MAX_PLAYERS),
                *saved_list,
                ft.Text("Pelin pituus", size=14),
                ft.Row(length_buttons, alignment=ft.MainAxisAlignment.CENTER),
                _button("Aloita peli", on_start),
                _button("Pelihistoria", lambda _: controller.set_mode(GameMode.HISTORY)),
                feedback,
                title="JYLY",
            )
        )

    def show_game() -> None:
        game = controller.state.current_game
        player = controller.current_player()
        if game is None or player is None:
            page.add(_panel(ft.Text("Peli ei löytynyt"), title="JYLY"))
            return

        total_throws = sum(len(item.rounds) for item in game.players)
        max_throws = len(game.players) * game.max_rounds

        async def commit_hits(token: int) -> None:
            await asyncio.sleep(HIT_CONFIRM_DELAY)
            hits = selection.take(token)
            if hits is not None:
                controller.record_turn(hits)

        def select_hits(hits: int) -> None:
            token = selection.select(hits)
            if token is None:
                return
            render()
            selection.attach(page.run_task(commit_hits, token))

        def do_undo(_: ft.ControlEvent) -> None:
            selection.cancel()
            controller.undo_last_round()

        def do_quit(_: ft.ControlEvent) -> None:
            selection.cancel()
            controller.reset_game()

        hit_buttons = [
            _button(
                f"[{hits}]" if selection.hits == hits else str(hits),
                lambda _, value=hits: select_hits(value),
                disabled=selection.pending and selection.hits != hits,
            )
            for hits in range(6)
        ]

        header_actions: list[ft.Control] = []
        if controller.can_undo() and not selection.pending:
            header_actions.append(_button("↶ Peru", do_undo))
        header_actions.append(_button("Lopeta", do_quit))

        highlight = ft.Colors.with_opacity(0.2, ft.Colors.GREEN)
        scoreboard: list[ft.Control] = []
        for rank, item in enumerate(stats.ranking(game), start=1):
            last = item.last_round()
            detail = f"({len(item.rounds)}/{game.max_rounds} kierrosta)"
            if last is not None:
                detail += f"  Viimeksi: +{last.points}p ({last.distance}m)"
            scoreboard.append(
                ft.Container(
                    padding=10,
                    border_radius=10,
                    bgcolor=highlight if item.id == player.id else None,
                    content=ft.Row(
                        [
                            ft.Text(f"#{rank} {item.name}", weight=ft.FontWeight.BOLD),
                            ft.Text(detail, size=12, expand=True),
                            ft.Text(str(item.total_score), size=20, weight=ft.FontWeight.BOLD),
                        ]
                    ),
                )
            )

        page.add(
            _panel(
                ft.Row(header_actions, alignment=ft.MainAxisAlignment.END),
                ft.ProgressBar(value=format_progress(total_throws, max_throws)),
                ft.Text(f"Heitot: {total_throws}/{max_throws}", size=12),
                title=f"Kierros {game.current_round}/{game.max_rounds}",
            ),
            _panel(
                ft.Text(f"{player.name} - Vuorossa", size=22),
                ft.Text(f"{distance_for(player)}m", size=48, weight=ft.FontWeight.BOLD),
                ft.Text("Heittoetäisyys"),
                ft.Row(hit_buttons, alignment=ft.MainAxisAlignment.CENTER),
            ),
            _panel(*scoreboard, title="Pistetilanne"),
        )

    def show_completed() -> None:
        game = controller.state.current_game
        if game is None:
            return
        champion = stats.winner(game)
        ranked: list[ft.Control] = []
        for rank, item in enumerate(stats.ranking(game), start=1):
            summary = stats.player_summary(item)
            color = PODIUM_COLORS[rank - 1] if rank <= len(PODIUM_COLORS) else None
            ranked.append(
                ft.Row(
                    [
                        ft.Text(f"#{rank}", size=22, color=color, weight=ft.FontWeight.BOLD),
                        ft.Column(
                            [
                                ft.Text(item.name, size=18),
                                ft.Text(
                                    f"Keskiarvo: {summary.average_points} | "
                                    f"Paras kierros: {summary.best_round}",
                                    size=12,
                                ),
                            ],
                            expand=True,
                            tight=True,
                        ),
                        ft.Text(format_points(item.total_score), size=18),
                    ]
                )
            )

        headline: list[ft.Control] = []
        if champion is not None:
            headline = [
                ft.Text("Voittaja:"),
                ft.Text(champion.name, size=40, weight=ft.FontWeight.BOLD),
                ft.Text(format_points(champion.total_score), size=24),
                ft.Text(stats.rating(champion.total_score)),
            ]

        page.add(
            _panel(*headline, title="Peli päättynyt!"),
            _panel(*ranked, title="Lopputulokset"),
            _panel(_game_stats_row(game), title="Pelin tilastot"),
            _button("Uusi peli", lambda _: controller.reset_game()),
            _button("Katso pelihistoriaa", lambda _: controller.set_mode(GameMode.HISTORY)),
        )

    def show_history() -> None:
        history = controller.state.history
        back = _button("Uusi peli", lambda _: controller.reset_game())
        if not history:
            page.add(
                _panel(
                    ft.Text("Et ole vielä pelannut yhtään peliä."),
                    _button("Aloita ensimmäinen peli", lambda _: controller.reset_game()),
                    title="Pelihistoria",
                )
            )
            return

        cards: list[ft.Control] = []
        for number, game in reversed(list(enumerate(history, start=1))):
            champion = stats.winner(game)
            lines: list[ft.Control] = [
                ft.Text(f"Peli #{number}", size=18, weight=ft.FontWeight.BOLD),
                ft.Text(format_played_at(game.created_at), size=12),
            ]
            if champion is not None:
                lines.append(ft.Text(f"🏆 {champion.name} {format_points(champion.total_score)}"))
            lines.extend(
                ft.Text(f"{rank}. {item.name}  {format_points(item.total_score)}", size=13)
                for rank, item in enumerate(stats.ranking(game), start=1)
            )
            lines.append(_game_stats_row(game))
            label = "Näytä tulokset" if game.is_completed else "Jatka peliä"
            lines.append(_button(label, lambda _, gid=game.id: controller.load_game(gid)))
            cards.append(_panel(*lines))

        overall: list[ft.Control] = []
        if len(history) > 1:
            summary = stats.history_summary(history)
            overall.append(
                _panel(
                    ft.ResponsiveRow(
                        [
                            _stat_tile(summary.games_played, "Peliä"),
                            _stat_tile(summary.average_score, "Keskiarvo"),
                            _stat_tile(summary.best_score, "Paras tulos"),
                            _stat_tile(summary.best_round, "Paras kierros"),
                        ]
                    ),
                    title="Kokonaistilastot",
                )
            )

        page.add(
            _panel(ft.Text(f"{len(history)} peliä pelattu"), back, title="Pelihistoria"),
            *cards,
            *overall,
        )

    controller.subscribe(render)
    render()


if __name__ == "__main__":
    run_flet_app()
