"""Mini README: FastAPI service exposing the leaderboard and admin workflow.

Structure:
    * create_application - application factory wiring store, controller, routes.
    * Public routes - leaderboard and match history, readable by anyone.
    * Admin routes - roster CRUD, session deletion and the session wizard,
      gated by the shared ``X-Admin-Password`` header.

One wizard may be open at a time, matching the single-operator use of the
admin panel. Store failures surface as 503 responses carrying a message the
operator can act on; the mirrored state is left untouched.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import Depends, FastAPI, Form, Header, HTTPException
from fastapi.responses import JSONResponse

from ..configuration import FinesLedgerSettings, get_settings
from ..controller import LedgerController, LedgerWriteError
from ..leaderboard import build_standings, summarise_history
from ..ledger.fines import FineKind, Tag
from ..logging_utils import get_logger
from ..session import SessionWizard, WizardStateError, WizardStep
from ..store import LedgerStore, create_store

LOGGER = get_logger(__name__)


def create_application(
    store: Optional[LedgerStore] = None,
    settings: Optional[FinesLedgerSettings] = None,
) -> FastAPI:
    """Create the FastAPI application with routes and dependencies."""

    settings = settings or get_settings()
    store = store or create_store(settings)
    controller = LedgerController(store)
    if settings.seed_demo_roster:
        controller.seed_demo_roster()

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            controller.close()
        LOGGER.info("Ledger controller unsubscribed from %s store", store.backend_name)

    app = FastAPI(title="Team Fines Ledger", version="0.1.0", lifespan=lifespan)
    wizard_state: Dict[str, Optional[SessionWizard]] = {"wizard": None}
    symbol = settings.currency_symbol

    @app.exception_handler(LedgerWriteError)
    async def _write_failed(_request, error: LedgerWriteError) -> JSONResponse:
        return JSONResponse({"detail": str(error)}, status_code=503)

    @app.exception_handler(WizardStateError)
    async def _wizard_conflict(_request, error: WizardStateError) -> JSONResponse:
        return JSONResponse({"detail": str(error)}, status_code=409)

    @app.exception_handler(KeyError)
    async def _not_found(_request, error: KeyError) -> JSONResponse:
        return JSONResponse({"detail": str(error.args[0]) if error.args else "Not found"}, status_code=404)

    @app.exception_handler(ValueError)
    async def _bad_input(_request, error: ValueError) -> JSONResponse:
        return JSONResponse({"detail": str(error)}, status_code=400)

    def require_admin(x_admin_password: Optional[str] = Header(None)) -> None:
        if x_admin_password != settings.admin_password:
            raise HTTPException(status_code=401, detail="Invalid credentials")

    def current_wizard() -> SessionWizard:
        wizard = wizard_state["wizard"]
        if wizard is None:
            raise WizardStateError("No session in progress")
        return wizard

    def wizard_payload(wizard: SessionWizard) -> Dict[str, Any]:
        payload = wizard.snapshot()
        if wizard.step is WizardStep.VOTING:
            payload["nominee_options"] = {
                category.value: wizard.nominee_options(category) for category in wizard.tallies
            }
        return payload

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"status": "ok", "loading": controller.loading, "backend": store.backend_name}

    @app.get("/leaderboard")
    async def leaderboard() -> Dict[str, Any]:
        """Public standings ordered by balance."""

        return build_standings(
            controller.players, high_debt_threshold=settings.high_debt_threshold, symbol=symbol
        )

    @app.get("/history")
    async def history() -> Dict[str, Any]:
        return {"records": summarise_history(controller.history, symbol=symbol)}

    @app.post("/admin/login", dependencies=[Depends(require_admin)])
    async def admin_login() -> Dict[str, Any]:
        return {"authenticated": True}

    @app.get("/admin/players", dependencies=[Depends(require_admin)])
    async def list_players() -> Dict[str, Any]:
        return {"players": [player.as_dict() for player in controller.players]}

    @app.post("/admin/players", dependencies=[Depends(require_admin)])
    async def add_player(name: str = Form(...)) -> Dict[str, Any]:
        player_id = controller.add_player(name)
        return controller.get_player(player_id).as_dict()

    @app.post("/admin/players/{player_id}/balance", dependencies=[Depends(require_admin)])
    async def edit_balance(player_id: str, total_owed: str = Form(...)) -> Dict[str, Any]:
        controller.set_player_total(player_id, total_owed)
        return controller.get_player(player_id).as_dict()

    @app.post("/admin/players/{player_id}/name", dependencies=[Depends(require_admin)])
    async def rename_player(player_id: str, name: str = Form(...)) -> Dict[str, Any]:
        controller.rename_player(player_id, name)
        return controller.get_player(player_id).as_dict()

    @app.post("/admin/players/{player_id}/pay-off", dependencies=[Depends(require_admin)])
    async def pay_off(player_id: str) -> Dict[str, Any]:
        controller.pay_off_player(player_id)
        return controller.get_player(player_id).as_dict()

    @app.delete("/admin/players/{player_id}", dependencies=[Depends(require_admin)])
    async def remove_player(player_id: str) -> Dict[str, Any]:
        controller.remove_player(player_id)
        return {"removed": player_id}

    @app.delete("/admin/history/{record_id}", dependencies=[Depends(require_admin)])
    async def delete_record(record_id: str) -> Dict[str, Any]:
        reversed_players = controller.delete_session(record_id)
        LOGGER.info("Session %s deleted via admin panel", record_id)
        return {"deleted": record_id, "reversed_players": reversed_players}

    @app.post("/admin/session/start", dependencies=[Depends(require_admin)])
    async def start_session() -> Dict[str, Any]:
        existing = wizard_state["wizard"]
        open_steps = {WizardStep.SELECT, WizardStep.VOTING, WizardStep.ACTIVE}
        if existing is not None and existing.step in open_steps:
            raise WizardStateError("A session is already in progress")
        wizard = SessionWizard(controller)
        wizard_state["wizard"] = wizard
        return wizard_payload(wizard)

    @app.get("/admin/session", dependencies=[Depends(require_admin)])
    async def session_state() -> Dict[str, Any]:
        return wizard_payload(current_wizard())

    @app.post("/admin/session/opponent", dependencies=[Depends(require_admin)])
    async def set_opponent(opponent: str = Form(...)) -> Dict[str, Any]:
        wizard = current_wizard()
        wizard.set_opponent(opponent)
        return wizard_payload(wizard)

    @app.post("/admin/session/select/{player_id}", dependencies=[Depends(require_admin)])
    async def toggle_player(player_id: str) -> Dict[str, Any]:
        wizard = current_wizard()
        wizard.toggle_player(player_id)
        return wizard_payload(wizard)

    @app.post("/admin/session/voting", dependencies=[Depends(require_admin)])
    async def start_voting() -> Dict[str, Any]:
        wizard = current_wizard()
        wizard.start_voting()
        return wizard_payload(wizard)

    @app.post("/admin/session/nominee", dependencies=[Depends(require_admin)])
    async def add_nominee(category: str = Form(...), player_id: str = Form(...)) -> Dict[str, Any]:
        wizard = current_wizard()
        wizard.add_nominee(Tag.from_str(category), player_id)
        return wizard_payload(wizard)

    @app.post("/admin/session/vote", dependencies=[Depends(require_admin)])
    async def change_vote(
        category: str = Form(...), player_id: str = Form(...), delta: int = Form(...)
    ) -> Dict[str, Any]:
        wizard = current_wizard()
        wizard.change_vote(Tag.from_str(category), player_id, delta)
        return wizard_payload(wizard)

    @app.post("/admin/session/finalize", dependencies=[Depends(require_admin)])
    async def finalize_votes() -> Dict[str, Any]:
        wizard = current_wizard()
        winners = wizard.finalize_voting()
        payload = wizard_payload(wizard)
        payload["winners"] = {category.value: ids for category, ids in winners.items()}
        return payload

    @app.post("/admin/session/skip", dependencies=[Depends(require_admin)])
    async def skip_voting() -> Dict[str, Any]:
        wizard = current_wizard()
        wizard.skip_voting()
        return wizard_payload(wizard)

    @app.post("/admin/session/back", dependencies=[Depends(require_admin)])
    async def back_to_voting() -> Dict[str, Any]:
        wizard = current_wizard()
        wizard.back_to_voting()
        return wizard_payload(wizard)

    @app.post("/admin/session/fine/{player_id}", dependencies=[Depends(require_admin)])
    async def apply_fine(player_id: str, kind: str = Form(...)) -> Dict[str, Any]:
        wizard = current_wizard()
        wizard.apply_fine(player_id, FineKind.from_str(kind))
        return wizard_payload(wizard)

    @app.post("/admin/session/item/{player_id}", dependencies=[Depends(require_admin)])
    async def toggle_item(player_id: str) -> Dict[str, Any]:
        wizard = current_wizard()
        wizard.toggle_item(player_id)
        return wizard_payload(wizard)

    @app.post("/admin/session/paid/{player_id}", dependencies=[Depends(require_admin)])
    async def toggle_paid(player_id: str) -> Dict[str, Any]:
        wizard = current_wizard()
        wizard.toggle_paid_off(player_id)
        return wizard_payload(wizard)

    @app.post("/admin/session/finish", dependencies=[Depends(require_admin)])
    async def finish_session() -> Dict[str, Any]:
        wizard = current_wizard()
        record = wizard.finish()
        wizard_state["wizard"] = None
        return {
            "committed": True,
            "record": summarise_history([record], symbol=symbol)[0] if record else None,
        }

    @app.post("/admin/session/cancel", dependencies=[Depends(require_admin)])
    async def cancel_session() -> Dict[str, Any]:
        wizard = current_wizard()
        wizard.cancel()
        wizard_state["wizard"] = None
        return {"cancelled": True}

    app.state.controller = controller
    app.state.store = store
    return app
