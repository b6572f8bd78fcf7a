"""
Service record stores.

Records live in a hierarchical key-value layout::

    services/{VEHICLE_NUMBER}/{storeKey} -> record

Two backends implement the same four operations: a local YAML document
(development and tests) and the Firebase Realtime Database REST API.
"""

import copy
import logging
import random
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

import requests
import yaml

from .errors import PERMISSION_DENIED, UNAVAILABLE, StoreError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"


class PushKeyGenerator:
    """
    Time-ordered 20 character keys in the Firebase push-id format.

    8 characters of millisecond timestamp followed by 12 random characters.
    Keys generated within the same millisecond increment the random part so
    they still sort in creation order.
    """

    def __init__(self, clock=time.time, rng: Optional[random.Random] = None):
        self._clock = clock
        self._rng = rng or random.SystemRandom()
        self._lock = threading.Lock()
        self._last_ms = -1
        self._last_rand = [0] * 12

    def __call__(self) -> str:
        with self._lock:
            now = int(self._clock() * 1000)
            if now == self._last_ms:
                for i in range(11, -1, -1):
                    if self._last_rand[i] < 63:
                        self._last_rand[i] += 1
                        break
                    self._last_rand[i] = 0
            else:
                self._last_rand = [self._rng.randrange(64) for _ in range(12)]
            self._last_ms = now

            ts_chars = []
            for _ in range(8):
                ts_chars.append(PUSH_CHARS[now % 64])
                now //= 64
            return "".join(reversed(ts_chars)) + "".join(
                PUSH_CHARS[i] for i in self._last_rand
            )


class ServiceStore:
    """Operations consumed by the service entry workflow."""

    def has_records(self, vehicle_number: str) -> bool:
        """True when any record exists under the vehicle's key."""
        raise NotImplementedError

    def fetch_all(self, vehicle_number: str) -> Dict[str, Record]:
        """All records under the vehicle's key as ``{store_key: record}``."""
        raise NotImplementedError

    def push(self, vehicle_number: str, record: Record) -> str:
        """Append a record under the vehicle's key and return its new store key."""
        raise NotImplementedError

    def set(self, vehicle_number: str, store_key: str, record: Record) -> None:
        """Overwrite the record at the vehicle's key + store key (full replace)."""
        raise NotImplementedError


class YamlStore(ServiceStore):
    """Records kept in a single YAML document: ``{services: {VN: {key: record}}}``."""

    def __init__(self, filename: Union[str, Path], key_generator=None):
        self.filename = Path(filename)
        self._generate_key = key_generator or PushKeyGenerator()
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Any]:
        if not self.filename.exists():
            return {"services": {}}
        try:
            with open(self.filename, "r") as fp:
                data = yaml.load(fp, Loader=yaml.SafeLoader)
        except PermissionError as e:
            raise StoreError(PERMISSION_DENIED, str(e)) from e
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(UNAVAILABLE, str(e)) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise StoreError(UNAVAILABLE, f"{self.filename} is not a mapping")
        if data.get("services") is None:
            data["services"] = {}
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        try:
            self.filename.parent.mkdir(parents=True, exist_ok=True)
            with open(self.filename, "w") as fp:
                yaml.dump(
                    data,
                    fp,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                    width=120,
                )
        except PermissionError as e:
            raise StoreError(PERMISSION_DENIED, str(e)) from e
        except OSError as e:
            raise StoreError(UNAVAILABLE, str(e)) from e

    def has_records(self, vehicle_number: str) -> bool:
        return bool(self.fetch_all(vehicle_number))

    def fetch_all(self, vehicle_number: str) -> Dict[str, Record]:
        with self._lock:
            records = self._load()["services"].get(vehicle_number) or {}
        logger.debug("Fetched %d record(s) for %s", len(records), vehicle_number)
        return copy.deepcopy(records)

    def push(self, vehicle_number: str, record: Record) -> str:
        with self._lock:
            data = self._load()
            vehicle = data["services"].setdefault(vehicle_number, {})
            if vehicle is None:
                vehicle = data["services"][vehicle_number] = {}
            key = self._generate_key()
            vehicle[key] = copy.deepcopy(record)
            self._save(data)
        logger.debug("Appended services/%s/%s", vehicle_number, key)
        return key

    def set(self, vehicle_number: str, store_key: str, record: Record) -> None:
        with self._lock:
            data = self._load()
            vehicle = data["services"].get(vehicle_number) or {}
            vehicle[store_key] = copy.deepcopy(record)
            data["services"][vehicle_number] = vehicle
            self._save(data)
        logger.debug("Overwrote services/%s/%s", vehicle_number, store_key)


class FirebaseStore(ServiceStore):
    """Firebase Realtime Database accessed through its REST API."""

    def __init__(
        self,
        database_url: str,
        auth: Optional[str] = None,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        self.database_url = database_url.rstrip("/")
        self.auth = auth
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, vehicle_number: str, store_key: Optional[str] = None) -> str:
        path = f"services/{quote(vehicle_number, safe='')}"
        if store_key is not None:
            path += f"/{quote(store_key, safe='')}"
        return f"{self.database_url}/{path}.json"

    def _request(self, method: str, url: str, params=None, json_body=None) -> Any:
        params = dict(params or {})
        if self.auth:
            params["auth"] = self.auth
        logger.debug("Sending %s request to %s", method, url)
        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    body = exc.response.json()
                    message = body.get("error", "") if isinstance(body, dict) else str(body)
                except ValueError:
                    message = exc.response.text
            message = message or str(exc)
            code = PERMISSION_DENIED if status in (401, 403) else UNAVAILABLE
            raise StoreError(code, message) from exc
        except requests.RequestException as exc:
            raise StoreError(UNAVAILABLE, str(exc)) from exc

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise StoreError(UNAVAILABLE, f"Invalid JSON from {url}") from exc

    def has_records(self, vehicle_number: str) -> bool:
        data = self._request("GET", self._url(vehicle_number), params={"shallow": "true"})
        return bool(data)

    def fetch_all(self, vehicle_number: str) -> Dict[str, Record]:
        data = self._request("GET", self._url(vehicle_number))
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise StoreError(UNAVAILABLE, f"Unexpected data under services/{vehicle_number}")
        return data

    def push(self, vehicle_number: str, record: Record) -> str:
        data = self._request("POST", self._url(vehicle_number), json_body=record)
        if not isinstance(data, dict) or "name" not in data:
            raise StoreError(UNAVAILABLE, "Store did not return a key for the new record")
        return data["name"]

    def set(self, vehicle_number: str, store_key: str, record: Record) -> None:
        self._request("PUT", self._url(vehicle_number, store_key), json_body=record)
