from dataclasses import dataclass, field
from enum import Enum

from graphclone import CloneStrategy, create_clone_factory


class TaskStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"


@dataclass(eq=False)
class Task:
    description: str
    status: TaskStatus
    blocked_by: list["Task"] = field(default_factory=list)


@dataclass(eq=False)
class Board:
    owner: str
    tasks: list[Task] = field(default_factory=list)


def build_board() -> Board:
    collect = Task("Collect data", TaskStatus.COMPLETED)
    analyze = Task("Analyze data", TaskStatus.PENDING, blocked_by=[collect])
    report = Task("Generate report", TaskStatus.PENDING, blocked_by=[analyze, collect])
    return Board("ada", [collect, analyze, report])


def main() -> None:
    board = build_board()

    for strategy in CloneStrategy:
        cloner = create_clone_factory(strategy)
        copy = cloner.deep_field_clone(board)

        # Shared dependencies stay shared inside the copy
        collect, analyze, report = copy.tasks
        assert report.blocked_by == [analyze, collect]
        assert analyze.blocked_by[0] is collect
        assert collect is not board.tasks[0]

        copy.tasks[1].status = TaskStatus.COMPLETED
        print(
            f"{strategy.value}: copy has {sum(t.status is TaskStatus.COMPLETED for t in copy.tasks)} "
            f"completed task(s), original still has "
            f"{sum(t.status is TaskStatus.COMPLETED for t in board.tasks)}"
        )


if __name__ == "__main__":
    main()
