"""FlagStore 抽象基底クラス"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .models import FeatureFlag


class FlagStore(ABC):
    """フラグ定義とユーザーオーバーライドのストア抽象基底クラス。"""

    @abstractmethod
    async def list_flags(self) -> list[FeatureFlag]:
        """全フラグをキー順で取得する。"""
        ...

    @abstractmethod
    async def get_flag(self, key: str) -> FeatureFlag:
        """キーに対応するフラグを取得する。存在しなければ FLAG_NOT_FOUND。"""
        ...

    @abstractmethod
    async def create_flag(self, flag: FeatureFlag) -> FeatureFlag:
        """フラグを作成し、ID 採番済みのフラグを返す。キー重複は FLAG_ALREADY_EXISTS。"""
        ...

    @abstractmethod
    async def save_flag(self, flag: FeatureFlag) -> FeatureFlag:
        """既存フラグを保存する。存在しなければ FLAG_NOT_FOUND。"""
        ...

    @abstractmethod
    async def delete_flag(self, key: str) -> None:
        """フラグとそのオーバーライドを削除する。存在しなければ FLAG_NOT_FOUND。"""
        ...

    @abstractmethod
    async def get_overrides_for_user(self, user_id: int) -> dict[int, bool]:
        """ユーザーのオーバーライドを {flag_id: enabled} で取得する。"""
        ...

    @abstractmethod
    async def upsert_override(self, flag_id: int, user_id: int, enabled: bool) -> None:
        """オーバーライドを作成または更新する。"""
        ...

    @abstractmethod
    async def delete_override(self, flag_id: int, user_id: int) -> bool:
        """オーバーライドを削除する。削除できたら True。"""
        ...
