from __future__ import annotations

import logging
import os
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pandas as pd


logger = logging.getLogger(__name__)

EXERCISE_COLUMNS = [
    "id", "name", "description", "muscle_group", "equipment", "difficulty_level",
    "category", "instructions", "video_url", "image_url", "created_at",
]
FOOD_COLUMNS = [
    "id", "name", "description", "calories_per_100g", "protein_g", "carbs_g",
    "fat_g", "fiber_g", "category", "created_at",
]
DEFAULT_LIMIT = 50


def _to_list(val: Any) -> List[str]:
    if isinstance(val, (list, tuple)):
        return [str(v) for v in val]
    if val is None or (isinstance(val, float) and pd.isna(val)) or str(val).strip() == "":
        return []
    # CSV cells hold steps separated by semicolons
    return [p.strip() for p in str(val).split(";") if p.strip()]


def _records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    clean = df.astype(object).where(pd.notna(df), None)
    return clean.to_dict("records")


class CatalogStore:
    """In-process exercise/food tables.

    Tables start from ``<data_dir>/exercises.csv`` and ``foods.csv`` when
    present and grow through ``insert_*``; nothing is written back to disk.
    """

    def __init__(self, data_dir: Optional[str] = None) -> None:
        self._lock = threading.Lock()
        self.exercises = self._load(data_dir, "exercises.csv", EXERCISE_COLUMNS)
        self.foods = self._load(data_dir, "foods.csv", FOOD_COLUMNS)
        if "instructions" in self.exercises.columns:
            self.exercises["instructions"] = self.exercises["instructions"].map(_to_list)

    def _load(self, data_dir: Optional[str], filename: str, columns: List[str]) -> pd.DataFrame:
        if not data_dir:
            return pd.DataFrame(columns=columns)
        path = os.path.join(data_dir, filename)
        if not os.path.exists(path):
            logger.info("No %s in %s, starting with an empty table", filename, data_dir)
            return pd.DataFrame(columns=columns)
        df = pd.read_csv(path)
        # Normalize columns for safer access
        df.columns = [str(c).strip() for c in df.columns]
        for col in columns:
            if col not in df.columns:
                df[col] = None
        df["id"] = [v if isinstance(v, str) and v else str(uuid.uuid4()) for v in df["id"]]
        return df[columns].copy()

    # --- writes ---
    def _append(self, table: str, columns: List[str], row: Dict[str, Any]) -> Dict[str, Any]:
        record = {col: row.get(col) for col in columns}
        record["id"] = str(uuid.uuid4())
        record["created_at"] = datetime.now(timezone.utc).isoformat()
        new = pd.DataFrame([record], columns=columns)
        with self._lock:
            current = getattr(self, table)
            setattr(self, table, new if current.empty else pd.concat([current, new], ignore_index=True))
        return record

    def insert_exercise(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return self._append("exercises", EXERCISE_COLUMNS, row)

    def insert_food(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return self._append("foods", FOOD_COLUMNS, row)

    # --- reads ---
    def has_exercises(self) -> bool:
        return not self.exercises.empty

    def has_foods(self) -> bool:
        return not self.foods.empty

    def search_exercises(
        self,
        category: Optional[str] = None,
        muscle_group: Optional[str] = None,
        equipment: Optional[str] = None,
        difficulty: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> List[Dict[str, Any]]:
        with self._lock:
            df = self.exercises
        mask = pd.Series(True, index=df.index)
        for col, val in (
            ("category", category),
            ("muscle_group", muscle_group),
            ("equipment", equipment),
            ("difficulty_level", difficulty),
        ):
            if val:
                mask &= df[col] == val
        if search:
            mask &= (
                df["name"].astype(str).str.contains(search, case=False, regex=False, na=False)
                | df["description"].astype(str).str.contains(search, case=False, regex=False, na=False)
            )
        return _records(df[mask].sort_values("name").head(limit))

    def search_foods(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        min_calories: Optional[float] = None,
        max_calories: Optional[float] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> List[Dict[str, Any]]:
        with self._lock:
            df = self.foods
        mask = pd.Series(True, index=df.index)
        if category:
            mask &= df["category"] == category
        if search:
            mask &= df["name"].astype(str).str.contains(search, case=False, regex=False, na=False)
        calories = pd.to_numeric(df["calories_per_100g"], errors="coerce")
        if min_calories is not None:
            mask &= calories >= min_calories
        if max_calories is not None:
            mask &= calories <= max_calories
        return _records(df[mask].sort_values("name").head(limit))
