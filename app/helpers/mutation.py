import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from app.helpers.enums import MutationStatus
from app.helpers.exception_handler import CustomException

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass
class MutationResult(Generic[T]):
    data: Optional[T] = None
    error: Optional[CustomException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Mutation(Generic[T]):
    """
    Tracks one remote write: IDLE -> PENDING -> (SUCCESS | ERROR).

    Each call starts again from PENDING. on_success receives the result,
    on_error the raised CustomException; both run before the caller resumes.
    """

    def __init__(
        self,
        mutation_fn: Callable[..., Awaitable[T]],
        on_success: Optional[Callable[[T], Any]] = None,
        on_error: Optional[Callable[[CustomException], Any]] = None,
        name: str = '',
    ):
        self.mutation_fn = mutation_fn
        self.on_success = on_success
        self.on_error = on_error
        self.name = name or getattr(mutation_fn, '__name__', 'mutation')
        self.reset()

    def reset(self) -> None:
        self.status = MutationStatus.IDLE
        self.data: Optional[T] = None
        self.error: Optional[CustomException] = None

    @property
    def is_idle(self) -> bool:
        return self.status == MutationStatus.IDLE

    @property
    def is_pending(self) -> bool:
        return self.status == MutationStatus.PENDING

    @property
    def is_success(self) -> bool:
        return self.status == MutationStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status == MutationStatus.ERROR

    async def mutate_async(self, *args, **kwargs) -> T:
        """Run the mutation and raise its CustomException on failure."""
        self.status = MutationStatus.PENDING
        self.data = None
        self.error = None
        try:
            data = await self.mutation_fn(*args, **kwargs)
        except CustomException as e:
            self.status = MutationStatus.ERROR
            self.error = e
            if self.on_error:
                self.on_error(e)
            raise
        except Exception:
            self.status = MutationStatus.ERROR
            logger.error(f"{self.name} failed unexpectedly", exc_info=True)
            raise

        self.status = MutationStatus.SUCCESS
        self.data = data
        if self.on_success:
            self.on_success(data)
        return data

    async def mutate(self, *args, **kwargs) -> MutationResult[T]:
        """Run the mutation and report domain failures in the result instead of raising."""
        try:
            data = await self.mutate_async(*args, **kwargs)
        except CustomException as e:
            return MutationResult(error=e)
        return MutationResult(data=data)
