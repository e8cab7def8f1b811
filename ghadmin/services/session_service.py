"""Session manager: GitHub connection lifecycle, organization selection and polling."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from ghadmin.config import settings
from ghadmin.exceptions import AuthError, GatewayError, NotConnectedError
from ghadmin.models.app_config import AppConfig
from ghadmin.models.repo import RepoDetail
from ghadmin.models.status import OrgStatus
from ghadmin.services import repo_service, sync_service
from ghadmin.services.config_store import ConfigStore, get_config_store
from ghadmin.services.events import STATUS_UPDATED, EventBus
from ghadmin.services.github_gateway import GitHubGateway, create_gateway
from ghadmin.services.poller import PollScheduler

logger = logging.getLogger(__name__)


class SessionManager:
    """Owns the token, the gateway and the OrgStatus.

    Every status write happens on the event loop running this manager;
    gateway calls run in worker threads and never touch the status.
    Readers get snapshots from ``get_status()``.
    """

    def __init__(
        self,
        config_store: ConfigStore | None = None,
        events: EventBus | None = None,
        gateway_factory: Callable[[str], GitHubGateway] = create_gateway,
        poll_interval: float | None = None,
    ):
        self.config_store = config_store or get_config_store()
        self.events = events or EventBus(backlog_size=settings.event_backlog_size)
        self._gateway_factory = gateway_factory
        self._gateway: GitHubGateway | None = None
        self._token = ""
        self._login = ""
        self._status = OrgStatus()
        self._poller = PollScheduler(self._fetch_all_orgs, interval=poll_interval)
        self._background: set[asyncio.Task] = set()

    @property
    def login(self) -> str:
        return self._login

    def get_status(self) -> OrgStatus:
        return self._status.model_copy(deep=True)

    def require_gateway(self) -> GitHubGateway:
        if self._gateway is None or not self._status.is_connected:
            raise NotConnectedError()
        return self._gateway

    # ── Lifecycle ──

    async def startup(self) -> OrgStatus:
        """Reconnect with the saved token, if there is one."""
        cfg = self._load_config()
        if cfg.github_token:
            self._status.selected_org = cfg.selected_org
            self._status.default_org = cfg.default_org
            if self._status.default_org:
                self._status.selected_org = ""
            try:
                await self.connect(cfg.github_token)
            except AuthError as e:
                logger.warning("Auto-connect failed: %s", e)
        return self.get_status()

    async def connect(self, token: str) -> None:
        """Verify ``token`` and start a session.

        Raises AuthError when the token cannot be verified; in that case
        nothing about the current session changes.
        """
        gateway = self._gateway_factory(token)
        try:
            user = await asyncio.to_thread(gateway.get_authenticated_user)
        except GatewayError as e:
            gateway.close()
            raise AuthError(f"failed to verify token: {e}") from e

        login = user.get("login", "")
        logger.info("Connected as: %s", login)

        previous = self._gateway
        self._gateway = gateway
        self._token = token
        self._login = login
        self._status.is_connected = True
        if previous is not None and previous is not gateway:
            previous.close()

        try:
            orgs = await asyncio.to_thread(gateway.list_organizations)
        except GatewayError as e:
            logger.error("Error fetching orgs: %s", e)
            orgs = []
        # The user's own account is listed first as a pseudo-organization
        self._status.organizations = [login, *orgs]

        cfg = self._load_config()
        self._status.selected_org = self._resolve_selected_org(cfg.default_org)
        self._status.default_org = cfg.default_org
        cfg.github_token = token
        cfg.selected_org = self._status.selected_org
        self._save_config(cfg)

        self._emit_status()
        self.start_polling()

    async def login_with_token(self, token: str) -> OrgStatus:
        await self.connect(token)
        return self.get_status()

    def disconnect(self) -> None:
        self.stop_polling()
        gateway = self._gateway
        self._gateway = None
        self._token = ""
        self._login = ""
        self._status = OrgStatus()
        if gateway is not None:
            gateway.close()

        cfg = self._load_config()
        cfg.github_token = ""
        cfg.selected_org = ""
        self._save_config(cfg)
        self._emit_status()

    logout = disconnect

    def close(self) -> None:
        """Stop background work and release the gateway; the saved token is kept."""
        self.stop_polling()
        for task in list(self._background):
            task.cancel()
        if self._gateway is not None:
            self._gateway.close()
            self._gateway = None

    # ── Organizations ──

    def select_organization(self, org: str) -> asyncio.Task:
        """Select ``org`` and fetch it right away. Returns the fetch task."""
        self._status.selected_org = org
        cfg = self._load_config()
        cfg.github_token = self._token
        cfg.selected_org = org
        self._save_config(cfg)
        self._emit_status()
        return self.refresh_organization(org)

    def set_default_organization(self, org: str) -> None:
        self._status.default_org = org
        cfg = self._load_config()
        cfg.default_org = org
        self._save_config(cfg)
        self._emit_status()

    def refresh_organization(self, org: str) -> asyncio.Task:
        """Fetch one organization in the background, outside the poll schedule."""
        task = asyncio.create_task(self._fetch_org(org))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def get_repo_detail(self, owner: str, repo: str) -> RepoDetail:
        return await repo_service.get_repo_detail(self.require_gateway(), owner, repo)

    # ── Polling ──

    def start_polling(self) -> bool:
        if self._status.is_polling or not self._status.is_connected:
            return False
        self._poller.start()
        self._status.is_polling = True
        self._emit_status()
        return True

    def stop_polling(self) -> bool:
        if not self._status.is_polling:
            return False
        self._poller.stop()
        self._status.is_polling = False
        self._emit_status()
        return True

    async def _fetch_all_orgs(self) -> None:
        # A pass belongs to the session it started in
        gateway, login = self._gateway, self._login
        if gateway is None:
            return
        for org in list(self._status.organizations):
            if self._gateway is not gateway or not self._status.is_connected:
                logger.info("Session changed during poll pass, abandoning it")
                return
            await sync_service.sync_org(gateway, org, login, self.events)

    async def _fetch_org(self, org: str) -> None:
        gateway = self._gateway
        if gateway is None or not org or not self._status.is_connected:
            return
        await sync_service.sync_org(gateway, org, self._login, self.events)

    # ── Helpers ──

    def _resolve_selected_org(self, default_org: str) -> str:
        orgs = self._status.organizations
        selected = self._status.selected_org
        if selected and selected not in orgs:
            selected = ""
        if not selected and default_org and default_org in orgs:
            selected = default_org
        if not selected and orgs:
            selected = orgs[0]
        return selected

    def _emit_status(self) -> None:
        self.events.emit(STATUS_UPDATED, self.get_status())

    def _load_config(self) -> AppConfig:
        try:
            return self.config_store.load()
        except Exception as e:
            logger.warning("Failed to load settings, using defaults: %s", e)
            return AppConfig()

    def _save_config(self, cfg: AppConfig) -> None:
        try:
            self.config_store.save(cfg)
        except Exception as e:
            logger.warning("Failed to save settings: %s", e)
