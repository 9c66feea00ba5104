# core/task_manager.py

import logging
from typing import List
from .local_store import TASKS, LocalStore
from .models import Task

logger = logging.getLogger(__name__)

PRIORITY_ORDER = {"High": 0, "Medium": 1, "Low": 2}


class TaskManager:
    """Farm to-do list: open tasks first, then by priority."""

    def __init__(self, store: LocalStore):
        self.store = store

    async def add_task(self, title: str, priority: str = "Medium", due_date: str = None) -> Task:
        fields = {"title": title, "priority": priority}
        if due_date:
            fields["due_date"] = due_date
        task = Task(**fields)
        await self.store.put(TASKS, task)
        logger.info(f"---TASK MANAGER: Added task '{task.title}'---")
        return task

    async def get_tasks(self) -> List[Task]:
        tasks = [Task(**data) for data in await self.store.get_all(TASKS)]
        return sorted(tasks, key=lambda t: (t.completed, PRIORITY_ORDER[t.priority], -t.created_at))

    async def get_task(self, task_id: str) -> Task:
        for task in await self.get_tasks():
            if task.id == task_id:
                return task
        raise KeyError(f"Task {task_id} not found.")

    async def update_task(self, task_id: str, **changes) -> Task:
        task = await self.get_task(task_id)
        updated = Task(**{**task.model_dump(), **changes, "id": task.id})
        await self.store.put(TASKS, updated)
        return updated

    async def toggle_task(self, task_id: str) -> Task:
        task = await self.get_task(task_id)
        return await self.update_task(task_id, completed=not task.completed)

    async def delete_task(self, task_id: str):
        await self.store.delete(TASKS, task_id)
        logger.info(f"---TASK MANAGER: Deleted task {task_id}---")
