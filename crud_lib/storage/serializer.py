from typing import Any, Optional, Protocol
import base64
import json
import os
import pickle

import yaml
from cryptography.fernet import Fernet
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC


class Serializer(Protocol):
    """Serialize/deserialize objects for backends that store bytes.

    Implementations should be symmetric: `dump` -> bytes, `load` <- bytes,
    and `load(dump(x)) == x` for every value they accept. `extension` is the
    file suffix used by file-based backends.
    """

    extension: str

    def dump(self, value: Any) -> bytes: ...

    def load(self, data: bytes) -> Any: ...


class PickleSerializer:
    """Binary serializer for arbitrary picklable Python objects."""

    extension = ".pkl"

    def dump(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)

    def load(self, data: bytes) -> Any:
        return pickle.loads(data)


class JSONSerializer:
    """Serializer using JSON (text).

    Values JSON cannot reproduce exactly (tuples, non-string dict keys) are
    rejected with ValueError instead of being stored in altered form.
    """

    extension = ".json"

    def dump(self, value: Any) -> bytes:
        encoded = json.dumps(value, sort_keys=True)
        if json.loads(encoded) != value:
            raise ValueError("value does not survive a JSON round trip")
        return encoded.encode("utf-8")

    def load(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


class YAMLSerializer:
    """Serializer using YAML (text). Lossy values are rejected as for JSON."""

    extension = ".yml"

    def dump(self, value: Any) -> bytes:
        encoded = yaml.safe_dump(value, sort_keys=True)
        if yaml.safe_load(encoded) != value:
            raise ValueError("value does not survive a YAML round trip")
        return encoded.encode("utf-8")

    def load(self, data: bytes) -> Any:
        return yaml.safe_load(data.decode("utf-8"))


class EncryptedSerializer:
    """Serializer that encrypts payloads using Fernet (symmetric, authenticated).

    The inner `base_serializer` (JSON by default) produces the plaintext.
    Provide either `key` (a Fernet key) or `password`; in password mode each
    payload carries its own random salt and PBKDF2 iteration count so the
    key can be derived again on load.
    """

    extension = ".enc"

    def __init__(
        self,
        *,
        key: Optional[bytes] = None,
        password: Optional[str] = None,
        iterations: int = 390000,
        base_serializer: Optional[Serializer] = None,
    ) -> None:
        if key is None and password is None:
            raise ValueError("EncryptedSerializer requires either `key` or `password`")
        self._key = key
        self._password = password
        self._iterations = iterations
        self.base_serializer = base_serializer or JSONSerializer()

    @staticmethod
    def _derive_key(password: str, salt: bytes, iterations: int) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=iterations,
        )
        return base64.urlsafe_b64encode(kdf.derive(password.encode("utf-8")))

    def dump(self, value: Any) -> bytes:
        inner = self.base_serializer.dump(value)
        if self._password is not None:
            salt = os.urandom(16)
            ct = Fernet(self._derive_key(self._password, salt, self._iterations)).encrypt(inner)
            frame = {
                "v": 1,
                "mode": "password",
                "kdf": "pbkdf2",
                "iterations": self._iterations,
                "salt": base64.urlsafe_b64encode(salt).decode("ascii"),
                "ct": ct.decode("ascii"),
            }
        else:
            ct = Fernet(self._key).encrypt(inner)
            frame = {"v": 1, "mode": "key", "ct": ct.decode("ascii")}
        return json.dumps(frame).encode("utf-8")

    def load(self, data: bytes) -> Any:
        """Parse the frame, derive the key if needed, decrypt and deserialize.

        Raises `cryptography.fernet.InvalidToken` on a wrong key/password.
        """
        frame = json.loads(data.decode("utf-8"))
        mode = frame.get("mode")
        if mode == "password":
            if self._password is None:
                raise ValueError("serializer was not configured with a password")
            salt = base64.urlsafe_b64decode(frame["salt"].encode("ascii"))
            iterations = frame.get("iterations", self._iterations)
            fernet = Fernet(self._derive_key(self._password, salt, iterations))
        elif mode == "key":
            if self._key is None:
                raise ValueError("serializer was not configured with a key")
            fernet = Fernet(self._key)
        else:
            raise ValueError("unknown frame format")
        return self.base_serializer.load(fernet.decrypt(frame["ct"].encode("ascii")))


_SERIALIZERS = {
    "pickle": PickleSerializer,
    "json": JSONSerializer,
    "yaml": YAMLSerializer,
}


def get_serializer(name: str, **options: Any) -> Serializer:
    """Return a serializer by name: pickle, json, yaml or encrypted.

    `options` are passed to `EncryptedSerializer` (key, password,
    iterations); `base` picks its inner serializer by name.
    """
    if name == "encrypted":
        base = options.pop("base", "json")
        return EncryptedSerializer(base_serializer=get_serializer(base), **options)
    try:
        return _SERIALIZERS[name]()
    except KeyError:
        raise ValueError(f"Unknown serializer '{name}'") from None
