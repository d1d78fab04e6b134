from typing import Optional, Any
from collections.abc import Iterable, Iterator, MutableMapping
import jsonpickle
from jsonpickle.unpickler import loadclass
from datamodel import BaseModel
from .models import VaultRecord
from .vault.crypto import VaultKey
from .vault.lock_state import SessionKeyCache


class ModelHandler(jsonpickle.handlers.BaseHandler):
    """ModelHandler.
    This class can handle with serializable Data Models.
    """
    def flatten(self, obj, data):
        data['__dict__'] = self.context.flatten(obj.__dict__, reset=False)
        return data

    def restore(self, obj):
        module_and_type = obj['py/object']
        mdl = loadclass(module_and_type)
        cls = mdl.__new__(mdl) if hasattr(mdl, '__new__') else object.__new__(mdl)
        cls.__dict__ = self.context.restore(obj['__dict__'], reset=False)
        return cls

jsonpickle.handlers.registry.register(BaseModel, ModelHandler, base=True)


class RefuseHandler(jsonpickle.handlers.BaseHandler):
    """RefuseHandler.
    Key material must never be flattened into a jsonpickle document.
    """
    def flatten(self, obj, data):
        raise TypeError(f"{type(obj).__name__} cannot be serialized")

    def restore(self, obj):
        raise TypeError(f"{obj.get('py/object')} cannot be deserialized")

jsonpickle.handlers.registry.register(VaultKey, RefuseHandler, base=True)
jsonpickle.handlers.registry.register(SessionKeyCache, RefuseHandler, base=True)


class PersistedVaultIndex(MutableMapping[str, VaultRecord]):
    """Vault index dict-like object.

    Holds the persistable side of a user's vaults: names, descriptions and
    the opaque key envelopes, keyed by vault id, plus the selected vault.
    Unlocked keys never belong here; they live in a SessionKeyCache.
    """

    def __init__(
        self,
        vaults: Optional[Iterable[VaultRecord]] = None,
        selected_vault_id: Optional[str] = None
    ) -> None:
        self._vaults: dict[str, VaultRecord] = {}
        self._selected: Optional[str] = None
        for vault in vaults or ():
            self[vault.id] = vault
        if selected_vault_id is not None:
            self.select(selected_vault_id)
        self._changed = False

    def __repr__(self) -> str:
        return (
            f'<PersistedVaultIndex [changed:{self._changed}] '
            f'vaults={list(self._vaults.keys())}, selected={self._selected!r}>'
        )

    # --- Properties ---

    @property
    def selected_vault_id(self) -> Optional[str]:
        return self._selected

    @property
    def is_changed(self) -> bool:
        return self._changed

    @is_changed.setter
    def is_changed(self, value: bool) -> None:
        self._changed = value

    def select(self, vault_id: Optional[str]) -> None:
        if vault_id is not None and vault_id not in self._vaults:
            raise KeyError(vault_id)
        self._selected = vault_id
        self._changed = True

    def get_selected(self) -> Optional[VaultRecord]:
        if self._selected is None:
            return None
        return self._vaults.get(self._selected)

    def update_vault(
        self,
        vault_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None
    ) -> VaultRecord:
        """Rename or re-describe a vault. The key envelope is never changed."""
        current = self._vaults[vault_id]
        updated = VaultRecord(
            id=current.id,
            name=name if name is not None else current.name,
            description=description if description is not None else current.description,
            encrypted_key=current.encrypted_key,
            key_encryption_version=current.key_encryption_version,
        )
        self._vaults[vault_id] = updated
        self._changed = True
        return updated

    # --- Magic Methods ---

    def __len__(self) -> int:
        return len(self._vaults)

    def __iter__(self) -> Iterator[str]:
        return iter(self._vaults)

    def __contains__(self, key: object) -> bool:
        return key in self._vaults

    def __getitem__(self, key: str) -> VaultRecord:
        return self._vaults[key]

    def __setitem__(self, key: str, value: VaultRecord) -> None:
        if isinstance(value, VaultKey) or not isinstance(value, VaultRecord):
            raise TypeError(
                f"PersistedVaultIndex only holds VaultRecord, got {type(value).__name__}"
            )
        if value.id != key:
            raise ValueError(f"Vault id mismatch: {key!r} != {value.id!r}")
        self._vaults[key] = value
        self._changed = True

    def __delitem__(self, key: str) -> None:
        del self._vaults[key]
        if self._selected == key:
            self._selected = None
        self._changed = True

    def add(self, vault: VaultRecord) -> None:
        self[vault.id] = vault

    def encode(self) -> str:
        """encode

            Encode the vault index using jsonpickle.

        Raises:
            RuntimeError: Error converting data to json.

        Returns:
            str: json version of the index
        """
        try:
            return jsonpickle.encode({
                'vaults': list(self._vaults.values()),
                'selected': self._selected,
            })
        except Exception as err:
            raise RuntimeError(err) from err

    @classmethod
    def decode(cls, data: str) -> 'PersistedVaultIndex':
        """decode.

            Restore a vault index encoded with :meth:`encode`.
        Args:
            data (str): jsonpickle document.

        Raises:
            RuntimeError: Error converting data from json.

        Returns:
            PersistedVaultIndex: restored index.
        """
        try:
            state: dict[str, Any] = jsonpickle.decode(data)
            return cls(state['vaults'], state.get('selected'))
        except (KeyError, TypeError, ValueError) as err:
            raise RuntimeError(err) from err
