"""
Persistence gateway for expenses, goals and the category taxonomy.

Reads never raise: they return a ReadResult that tells "nothing stored" apart
from "the store could not be read". Writes raise StoreError or NotFoundError
so the caller can surface the failure.
"""

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Generic, List, Optional, Tuple, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gestor_financeiro.exceptions import ConflictError, NotFoundError, StoreError
from gestor_financeiro.models.category import Category, Subcategory
from gestor_financeiro.models.expense import Expense
from gestor_financeiro.models.goal import Goal
from gestor_financeiro.schemas.category import CategoryResponse, SubcategoryResponse
from gestor_financeiro.schemas.expense import ExpenseRead, ExpenseWrite
from gestor_financeiro.schemas.goal import GoalBase, GoalRead
from gestor_financeiro.schemas.settings import ConnectionTestResult
from gestor_financeiro.services.taxonomy_service import TaxonomyIndex, build_taxonomy_index

logger = logging.getLogger(__name__)

T = TypeVar("T")

CENTS = Decimal("0.01")


class ReadResult(Generic[T]):
    """Outcome of a read: the items, or the reason they could not be fetched."""

    def __init__(self, items: Optional[List[T]] = None, error: Optional[str] = None):
        self.items: List[T] = items or []
        self.error = error

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def is_empty(self) -> bool:
        return not self.failed and not self.items

    @classmethod
    def failure(cls, error: str) -> "ReadResult[T]":
        return cls(items=[], error=error)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """Return [start, end) for a calendar month."""
    start_date = date(year, month, 1)
    if month == 12:
        end_date = date(year + 1, 1, 1)
    else:
        end_date = date(year, month + 1, 1)
    return start_date, end_date


def to_cents(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


class ExpenseGateway:
    """CRUD over the ``despesas``, ``metas``, ``categoria`` and ``subcategoria`` tables."""

    def __init__(self, db: Session):
        self.db = db

    def _read_failed(self, what: str, error: SQLAlchemyError) -> ReadResult:
        # A failed statement leaves the transaction aborted on PostgreSQL
        self.db.rollback()
        logger.error(f"Failed to fetch {what}: {error}")
        return ReadResult.failure(str(error))

    # Taxonomy reads

    def list_categories(self) -> ReadResult[CategoryResponse]:
        try:
            rows = self.db.query(Category).order_by(Category.name).all()
        except SQLAlchemyError as e:
            return self._read_failed("categories", e)
        return ReadResult([CategoryResponse.model_validate(c) for c in rows])

    def list_subcategories(self, category_id: Optional[str] = None) -> ReadResult[SubcategoryResponse]:
        try:
            query = self.db.query(Subcategory, Category.name).outerjoin(
                Category, Subcategory.category_id == Category.id
            )
            if category_id is not None:
                query = query.filter(Subcategory.category_id == category_id)
            rows = query.order_by(Subcategory.name).all()
        except SQLAlchemyError as e:
            return self._read_failed("subcategories", e)

        return ReadResult([
            SubcategoryResponse(
                id=sub.id,
                name=sub.name,
                category_id=sub.category_id,
                category_name=category_name,
            )
            for sub, category_name in rows
        ])

    def taxonomy_index(self) -> ReadResult[TaxonomyIndex]:
        categories = self.list_categories()
        if categories.failed:
            return ReadResult.failure(categories.error)
        subcategories = self.list_subcategories()
        if subcategories.failed:
            return ReadResult.failure(subcategories.error)
        return ReadResult([build_taxonomy_index(categories.items, subcategories.items)])

    # Expense reads

    def _enrich(self, expense: Expense, index: TaxonomyIndex) -> ExpenseRead:
        read = ExpenseRead.model_validate(expense)
        read.subcategory_name = index.subcategory_name(expense.subcategory_id)
        read.category_name = index.category_name_for_subcategory(expense.subcategory_id)
        read.month = expense.date.month if expense.date else None
        return read

    def _read_expenses(self, what: str, start: Optional[date] = None, end: Optional[date] = None) -> ReadResult[ExpenseRead]:
        index = self.taxonomy_index()
        if index.failed:
            return ReadResult.failure(index.error)
        try:
            query = self.db.query(Expense)
            if start is not None:
                query = query.filter(Expense.date >= start, Expense.date < end)
            rows = query.order_by(Expense.date.desc()).all()
        except SQLAlchemyError as e:
            return self._read_failed(what, e)

        if not rows:
            logger.info(f"No {what} found")
        return ReadResult([self._enrich(e, index.items[0]) for e in rows])

    def list_expenses(self) -> ReadResult[ExpenseRead]:
        return self._read_expenses("expenses")

    def list_expenses_by_month(self, year: int, month: int) -> ReadResult[ExpenseRead]:
        start, end = month_bounds(year, month)
        return self._read_expenses(f"expenses for {start:%Y-%m}", start, end)

    def get_category(self, category_id: str) -> CategoryResponse:
        return CategoryResponse.model_validate(self._get(Category, category_id, "Category"))

    def get_subcategory(self, subcategory_id: str) -> SubcategoryResponse:
        return self._subcategory_read(self._get(Subcategory, subcategory_id, "Subcategory"))

    def get_expense(self, expense_id: str) -> ExpenseRead:
        expense = self._get(Expense, expense_id, "Expense")
        index = self.taxonomy_index()
        if index.failed:
            raise StoreError(index.error)
        return self._enrich(expense, index.items[0])

    # Goal reads

    def _read_goals(self, what: str, start: Optional[date] = None, end: Optional[date] = None) -> ReadResult[GoalRead]:
        try:
            query = self.db.query(Goal, Category.name).outerjoin(Category, Goal.category_id == Category.id)
            if start is not None:
                query = query.filter(Goal.start_date >= start, Goal.start_date < end)
            rows = query.all()
        except SQLAlchemyError as e:
            return self._read_failed(what, e)

        items = []
        for goal, category_name in rows:
            read = GoalRead.model_validate(goal)
            read.category_name = category_name
            items.append(read)
        return ReadResult(items)

    def get_goal(self, goal_id: str) -> GoalRead:
        return self._goal_read(self._get(Goal, goal_id, "Goal"))

    def list_goals(self) -> ReadResult[GoalRead]:
        return self._read_goals("goals")

    def list_goals_by_month(self, year: int, month: int) -> ReadResult[GoalRead]:
        start, end = month_bounds(year, month)
        return self._read_goals(f"goals for {start:%Y-%m}", start, end)

    # Writes

    def _get(self, model, entity_id: str, entity: str):
        try:
            row = self.db.query(model).filter(model.id == entity_id).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(str(e)) from e
        if row is None:
            raise NotFoundError(entity, entity_id)
        return row

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise StoreError(f"Failed to {action}") from e

    def _apply_expense(self, expense: Expense, data: ExpenseWrite) -> None:
        self._get(Subcategory, data.subcategory_id, "Subcategory")
        expense.amount = to_cents(data.amount)
        expense.date = data.date
        expense.subcategory_id = data.subcategory_id
        expense.location = data.location
        expense.detail = data.detail
        expense.time = data.time
        expense.card = data.card
        expense.card_last_digits = data.card_last_digits
        expense.status = data.status
        expense.due_date = data.due_date

    def _saved_read(self, expense: Expense, index: Optional[TaxonomyIndex]) -> ExpenseRead:
        """Read model for a committed row. A failed taxonomy read leaves the names empty."""
        if index is None:
            result = self.taxonomy_index()
            if result.failed:
                logger.warning(f"Expense {expense.id} saved, but its names could not be read: {result.error}")
                index = build_taxonomy_index([], [])
            else:
                index = result.items[0]
        return self._enrich(expense, index)

    def create_expense(self, data: ExpenseWrite, index: Optional[TaxonomyIndex] = None) -> ExpenseRead:
        """Insert an expense. ``index`` supplies display names without reading the taxonomy again."""
        expense = Expense()
        self._apply_expense(expense, data)
        self.db.add(expense)
        self._commit("save expense")
        self.db.refresh(expense)
        logger.info(f"Saved expense {expense.id}: {expense.location} {expense.amount}")
        return self._saved_read(expense, index)

    def update_expense(self, expense_id: str, data: ExpenseWrite) -> ExpenseRead:
        expense = self._get(Expense, expense_id, "Expense")
        self._apply_expense(expense, data)
        self._commit("update expense")
        self.db.refresh(expense)
        return self._saved_read(expense, None)

    def delete_expense(self, expense_id: str) -> None:
        expense = self._get(Expense, expense_id, "Expense")
        self.db.delete(expense)
        self._commit("delete expense")

    def _apply_goal(self, goal: Goal, data: GoalBase) -> None:
        self._get(Category, data.category_id, "Category")
        goal.category_id = data.category_id
        goal.target_amount = to_cents(data.target_amount)
        goal.period = data.period
        goal.start_date = data.start_date

    def _goal_read(self, goal: Goal) -> GoalRead:
        read = GoalRead.model_validate(goal)
        read.category_name = goal.category.name if goal.category else None
        return read

    def create_goal(self, data: GoalBase) -> GoalRead:
        goal = Goal()
        self._apply_goal(goal, data)
        self.db.add(goal)
        self._commit("save goal")
        self.db.refresh(goal)
        return self._goal_read(goal)

    def update_goal(self, goal_id: str, data: GoalBase) -> GoalRead:
        goal = self._get(Goal, goal_id, "Goal")
        self._apply_goal(goal, data)
        self._commit("update goal")
        self.db.refresh(goal)
        return self._goal_read(goal)

    def delete_goal(self, goal_id: str) -> None:
        goal = self._get(Goal, goal_id, "Goal")
        self.db.delete(goal)
        self._commit("delete goal")

    def create_category(self, name: str) -> CategoryResponse:
        category = Category(name=name)
        self.db.add(category)
        self._commit("save category")
        self.db.refresh(category)
        return CategoryResponse.model_validate(category)

    def update_category(self, category_id: str, name: str) -> CategoryResponse:
        category = self._get(Category, category_id, "Category")
        category.name = name
        self._commit("update category")
        return CategoryResponse.model_validate(category)

    def delete_category(self, category_id: str) -> None:
        category = self._get(Category, category_id, "Category")
        if category.subcategories or category.goals:
            raise ConflictError(f"Category {category_id} still has subcategories or goals")
        self.db.delete(category)
        self._commit("delete category")

    def _subcategory_read(self, subcategory: Subcategory) -> SubcategoryResponse:
        read = SubcategoryResponse.model_validate(subcategory)
        read.category_name = subcategory.category.name if subcategory.category else None
        return read

    def create_subcategory(self, name: str, category_id: str) -> SubcategoryResponse:
        self._get(Category, category_id, "Category")
        subcategory = Subcategory(name=name, category_id=category_id)
        self.db.add(subcategory)
        self._commit("save subcategory")
        self.db.refresh(subcategory)
        return self._subcategory_read(subcategory)

    def update_subcategory(
        self,
        subcategory_id: str,
        name: Optional[str] = None,
        category_id: Optional[str] = None
    ) -> SubcategoryResponse:
        subcategory = self._get(Subcategory, subcategory_id, "Subcategory")
        if category_id is not None:
            self._get(Category, category_id, "Category")
            subcategory.category_id = category_id
        if name is not None:
            subcategory.name = name
        self._commit("update subcategory")
        self.db.refresh(subcategory)
        return self._subcategory_read(subcategory)

    def delete_subcategory(self, subcategory_id: str) -> None:
        subcategory = self._get(Subcategory, subcategory_id, "Subcategory")
        if subcategory.expenses:
            raise ConflictError(f"Subcategory {subcategory_id} still has expenses")
        self.db.delete(subcategory)
        self._commit("delete subcategory")

    # Diagnostics

    def test_connection(self) -> ConnectionTestResult:
        """Check the store answers and report how many expenses it holds."""
        details = []
        try:
            count = self.db.query(func.count(Expense.id)).scalar() or 0
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Connection test failed: {e}")
            return ConnectionTestResult(
                success=False,
                message=f"Failed to query expenses: {e}",
                details=[f"Query failed: {type(e).__name__}"],
            )

        details.append(f"Query succeeded. Expenses: {count}")
        if count == 0:
            details.append("Query returned no rows (empty table)")
            message = "Connected, but no expenses were returned."
        else:
            message = f"Connected. Found {count} expense(s)."

        return ConnectionTestResult(success=True, message=message, details=details, expenses_found=count)
