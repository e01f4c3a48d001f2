"""
事件通道 (Event Channel)
========================

观察者注册表：按注册顺序同步通知所有订阅者。

- 不去重：每次 emit 都会通知全部订阅者
- 不排队：通知在 emit 调用栈内立即完成，可递归
- 通知期间允许订阅/退订，本轮通知使用 emit 开始时的订阅者快照
"""

from typing import Any, Callable, Generic, List, TypeVar

T = TypeVar('T')

Listener = Callable[[T], None]


class EventChannel(Generic[T]):
    """
    单一负载的多播事件通道

    用法:
        channel = EventChannel("state_changed")
        channel.subscribe(lambda state: ...)
        channel.emit(TowerState.LOW)
    """

    def __init__(self, name: str = "event"):
        self.name = name
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener, first: bool = False) -> Listener:
        """
        注册订阅者，返回订阅者本身以便退订

        Parameters:
            listener: 回调
            first: 插入到订阅列表最前（需先于其他订阅者观察到通知时使用）
        """
        if first:
            self._listeners.insert(0, listener)
        else:
            self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: Listener) -> bool:
        """退订，返回是否曾订阅"""
        try:
            self._listeners.remove(listener)
        except ValueError:
            return False
        return True

    def emit(self, payload: T) -> None:
        """按注册顺序同步通知"""
        for listener in list(self._listeners):
            listener(payload)

    def clear(self) -> None:
        """移除全部订阅者"""
        self._listeners.clear()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def __contains__(self, listener: Any) -> bool:
        return listener in self._listeners

    def __repr__(self) -> str:
        return f"EventChannel({self.name!r}, listeners={len(self._listeners)})"


__all__ = [
    'EventChannel',
    'Listener'
]
