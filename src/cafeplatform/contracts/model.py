# src/cafeplatform/contracts/model.py
from __future__ import annotations

import math
from typing import Annotated, Any, Literal, Union

import numpy as np
import numpy.typing as npt
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .core import CoverClass

VARIANCE_FLOOR = 1e-6
DENOM_FLOOR = 1e-9


class ClassStats(BaseModel):
    model_config = ConfigDict(frozen=True)
    mean: float
    variance: float = Field(gt=0.0)


def gaussian_pdf(x: npt.ArrayLike, mean: float, variance: float) -> npt.NDArray[np.float64]:
    std = math.sqrt(variance)
    z = (np.asarray(x, dtype=np.float64) - mean) / std
    with np.errstate(under="ignore", over="ignore"):
        return np.exp(-0.5 * z * z) / (std * math.sqrt(2.0 * math.pi))


class TrainedModel(BaseModel):
    """Naive Bayes gaussiano de una feature: P(cafe | x) por regla de Bayes."""
    model_config = ConfigDict(frozen=True)
    kind: Literal["trained"] = "trained"
    target: ClassStats
    other: ClassStats
    prior_target: float = Field(ge=0.0, le=1.0)
    prior_other: float = Field(ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _priors_sum_one(self) -> "TrainedModel":
        if not math.isclose(self.prior_target + self.prior_other, 1.0, abs_tol=1e-9):
            raise ValueError("prior_target + prior_other debe ser 1")
        return self

    def predict_many(self, values: npt.ArrayLike) -> npt.NDArray[np.float64]:
        like_t = gaussian_pdf(values, self.target.mean, self.target.variance) * self.prior_target
        like_o = gaussian_pdf(values, self.other.mean, self.other.variance) * self.prior_other
        denom = like_t + like_o
        # ambas densidades pueden hacer underflow a 0
        denom = np.where(denom > 0, denom, DENOM_FLOOR)
        return like_t / denom

    def predict(self, value: float) -> float:
        return float(self.predict_many(np.array([value], dtype=np.float64))[0])


class DegenerateModel(BaseModel):
    """Corpus con una sola clase: siempre predice esa clase con probabilidad 1."""
    model_config = ConfigDict(frozen=True)
    kind: Literal["degenerate"] = "degenerate"
    present: CoverClass

    @property
    def fixed_probability(self) -> float:
        return 1.0 if self.present is CoverClass.TARGET else 0.0

    def predict_many(self, values: npt.ArrayLike) -> npt.NDArray[np.float64]:
        return np.full(np.shape(values), self.fixed_probability, dtype=np.float64)

    def predict(self, value: float) -> float:
        return self.fixed_probability


ClassifierModel = Annotated[Union[TrainedModel, DegenerateModel], Field(discriminator="kind")]


# -------------------------
# Registro persistido (JSON)
# -------------------------
class StatsRecord(BaseModel):
    mean: float
    variance: float


class ModelRecord(BaseModel):
    """
    Formato en disco: {cafe, noCafe, priorCafe, priorNoCafe, degenerate}.
    En modelos degenerados las stats son placeholders.
    """
    model_config = ConfigDict(populate_by_name=True)
    cafe: StatsRecord
    no_cafe: StatsRecord = Field(alias="noCafe")
    prior_cafe: float = Field(alias="priorCafe")
    prior_no_cafe: float = Field(alias="priorNoCafe")
    degenerate: bool = False

    @classmethod
    def from_model(cls, model: ClassifierModel) -> "ModelRecord":
        if isinstance(model, DegenerateModel):
            placeholder = StatsRecord(mean=0.0, variance=VARIANCE_FLOOR)
            p = model.fixed_probability
            return cls(cafe=placeholder, no_cafe=placeholder,
                       prior_cafe=p, prior_no_cafe=1.0 - p, degenerate=True)
        return cls(
            cafe=StatsRecord(**model.target.model_dump()),
            no_cafe=StatsRecord(**model.other.model_dump()),
            prior_cafe=model.prior_target,
            prior_no_cafe=model.prior_other,
            degenerate=False,
        )

    def to_model(self) -> ClassifierModel:
        if self.degenerate:
            present = CoverClass.TARGET if self.prior_cafe >= 0.5 else CoverClass.OTHER
            return DegenerateModel(present=present)
        return TrainedModel(
            target=ClassStats(mean=self.cafe.mean, variance=self.cafe.variance),
            other=ClassStats(mean=self.no_cafe.mean, variance=self.no_cafe.variance),
            prior_target=self.prior_cafe,
            prior_other=self.prior_no_cafe,
        )

    def as_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


__all__ = [
    "VARIANCE_FLOOR", "DENOM_FLOOR", "ClassStats", "TrainedModel", "DegenerateModel",
    "ClassifierModel", "StatsRecord", "ModelRecord", "gaussian_pdf",
]
