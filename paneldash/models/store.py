import logging
import os
import pickle
import threading
import uuid

from ..exceptions import UserNotFoundError
from ..utils.security import check_hash, generate_hash

logger = logging.getLogger(__name__)


class Store:
    """
    Credential store holding user records as plain dicts keyed by user_id.

    With a `path` the records are pickled to disk after every write; with
    `path=None` the store lives in memory only (tests, throwaway runs).
    """

    def __init__(self, path: str | os.PathLike | None = None):
        self.path = str(path) if path else None
        self.users: dict[str, dict] = {}
        self._rw = threading.RLock()

        if self.path:
            logger.info("Store using file %s", self.path)
            self._load()

    # ---------- Persistence ----------
    def _load(self):
        """Load data from the pickle file, or start empty if unavailable or invalid."""
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "rb") as f:
                data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            logger.warning("Store load failed (%s); starting empty.", e)
            return

        if isinstance(data, dict):
            self.users = data.get("users", {}) or {}
            logger.info("Store loaded: users=%d", len(self.users))
        else:
            # Incompatible data format: back up the old file and start empty
            bak = self.path + ".bak"
            try:
                os.replace(self.path, bak)
                logger.warning("Incompatible store (%s); backed up to %s. Starting empty.",
                               type(data).__name__, bak)
            except OSError as e:
                logger.error("Store backup failed: %s", e)

    def _dump(self):
        """Write the in-memory data to the pickle file safely (atomic replace)."""
        if not self.path:
            return
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        tmp = self.path + ".tmp"
        with open(tmp, "wb") as f:
            pickle.dump({"users": self.users}, f, protocol=pickle.HIGHEST_PROTOCOL)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)

    def save(self):
        """Thread-safe save method."""
        with self._rw:
            logger.debug("Saving store to %s", self.path)
            self._dump()

    def clear(self):
        """Drop every record and persist the empty state."""
        with self._rw:
            self.users.clear()
            self._dump()

    # ---------- Users ----------
    @staticmethod
    def _norm_email(email: str | None) -> str:
        return (email or "").strip().lower()

    def user_exists(self, email: str) -> bool:
        """Return True if a user with this email already exists."""
        return self.find_user_by_email(email) is not None

    def find_user_by_email(self, email: str) -> dict | None:
        """Find a user by email (case-insensitive)."""
        key = self._norm_email(email)
        if not key:
            return None
        for u in self.users.values():
            if u["email"] == key:
                return u
        return None

    def get_user(self, user_id: str | None) -> dict | None:
        """Get user data by user_id."""
        if not user_id:
            return None
        return self.users.get(user_id)

    def create_user(self, name: str, email: str, password_hash: str) -> str:
        """Create a new user and return its ID."""
        with self._rw:
            key = self._norm_email(email)
            if not key:
                raise ValueError("Email is required")
            if self.user_exists(key):
                raise ValueError("Email already exists")
            uid = str(uuid.uuid4())
            self.users[uid] = {
                "user_id": uid,
                "name": name,
                "email": key,
                "password_hash": password_hash,
            }
            self._dump()
            return uid

    def update_password(self, user_id: str, password_hash: str) -> None:
        """Replace a user's password hash."""
        with self._rw:
            u = self.users.get(user_id)
            if u is None:
                raise UserNotFoundError()
            u["password_hash"] = password_hash
            self._dump()

    def delete_user(self, user_id: str) -> bool:
        """Delete a user by ID."""
        with self._rw:
            if user_id in self.users:
                del self.users[user_id]
                self._dump()
                return True
            return False

    def verify_credentials(self, email: str, password: str) -> dict | None:
        """Return the user dict when the password matches, else None."""
        u = self.find_user_by_email(email)
        if not u or not check_hash(password, u["password_hash"]):
            return None
        return u

    def ensure_user(self, name: str, email: str, password: str) -> str:
        """
        Ensure a user with `email` exists.
        - If exists: update name and password hash (idempotent).
        - If not:   create a new user.
        """
        with self._rw:
            u = self.find_user_by_email(email)
            if u:
                u["name"] = name
                u["password_hash"] = generate_hash(password)
                self._dump()
                return u["user_id"]
            return self.create_user(name, email, generate_hash(password))
