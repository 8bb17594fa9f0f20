# app/core/events.py

"""
프로세스 내부 도메인 이벤트 버스 모듈입니다.

- 핸들러는 `@event_bus.subscribe(EventType)` 데코레이터로 등록합니다.
- `await event_bus.publish(db, event)`는 등록된 핸들러를 등록 순서대로 실행하며,
  발행자와 같은 세션(=같은 트랜잭션)을 넘겨줍니다.
- 핸들러에서 발생한 예외는 그대로 전파되어 발행자의 트랜잭션 전체가 롤백됩니다.
"""

import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Type

from sqlmodel.ext.asyncio.session import AsyncSession

logger = logging.getLogger(__name__)

EventHandler = Callable[[AsyncSession, Any], Awaitable[None]]


class EventBus:
    def __init__(self):
        self._handlers: Dict[Type, List[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: Type) -> Callable[[EventHandler], EventHandler]:
        def decorator(handler: EventHandler) -> EventHandler:
            if handler not in self._handlers[event_type]:
                self._handlers[event_type].append(handler)
                logger.debug("이벤트 핸들러 등록: %s -> %s", event_type.__name__, handler.__qualname__)
            return handler
        return decorator

    def handlers_for(self, event_type: Type) -> List[EventHandler]:
        return list(self._handlers.get(event_type, []))

    async def publish(self, db: AsyncSession, event: Any) -> None:
        handlers = self.handlers_for(type(event))
        if not handlers:
            logger.warning("구독자가 없는 이벤트 발행: %s", type(event).__name__)
        for handler in handlers:
            logger.info("이벤트 처리: %s -> %s", type(event).__name__, handler.__qualname__)
            await handler(db, event)


event_bus = EventBus()
