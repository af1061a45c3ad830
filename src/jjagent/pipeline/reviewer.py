"""
Outcome Reviewer - grades an ExecutionResult.

Three independent checks always run:
- all_steps_completed: one StepResult per plan step
- no_errors: no StepResult failed
- reasonable_duration: total time within DURATION_LIMIT_FACTOR x estimate

Approval requires every check to pass and the execution to have succeeded.
"""

from __future__ import annotations

from jjagent.exceptions import ReviewError
from jjagent.models import ExecutionResult, ReviewResult, ValidationCheck, ValidationResult
from jjagent.utils.logger import get_logger

logger = get_logger(__name__)

# Independent thresholds, both multiples of the plan's estimated duration
DURATION_LIMIT_FACTOR = 2.0
OPTIMIZE_SUGGESTION_FACTOR = 1.5

OPTIMIZE_SUGGESTION = "Consider optimizing slow steps or parallelizing independent operations"


class Reviewer:
    """
    Validates an execution result and derives suggestions.

    Example:
        review = Reviewer().review(execution_result)
        if not review.approved:
            for suggestion in review.suggestions:
                print(suggestion)
    """

    def __init__(
        self,
        duration_limit_factor: float = DURATION_LIMIT_FACTOR,
        optimize_suggestion_factor: float = OPTIMIZE_SUGGESTION_FACTOR,
    ) -> None:
        self.duration_limit_factor = duration_limit_factor
        self.optimize_suggestion_factor = optimize_suggestion_factor

    def review(self, result: ExecutionResult) -> ReviewResult:
        """
        Review an execution result.

        Raises:
            ReviewError: If the result cannot be reviewed
        """
        try:
            validation = self.validate(result)
            suggestions = self.suggestions(result, validation)
        except Exception as exc:
            raise ReviewError(f"Failed to review execution: {exc}", cause=exc) from exc

        review = ReviewResult(
            execution=result,
            validation=validation,
            suggestions=tuple(suggestions),
            approved=validation.passed and result.success,
        )
        logger.info(
            f"Review: approved={review.approved}, "
            f"checks={len(validation.checks) - len(validation.failed_checks)}/{len(validation.checks)}, "
            f"suggestions={len(review.suggestions)}"
        )
        return review

    def validate(self, result: ExecutionResult) -> ValidationResult:
        checks = (
            self.check_all_steps_completed(result),
            self.check_no_errors(result),
            self.check_reasonable_duration(result),
        )
        return ValidationResult(passed=all(check.passed for check in checks), checks=checks)

    def check_all_steps_completed(self, result: ExecutionResult) -> ValidationCheck:
        completed = len(result.step_results)
        expected = len(result.plan.steps)
        passed = completed == expected
        return ValidationCheck(
            name="all_steps_completed",
            passed=passed,
            message=(
                "All steps were executed"
                if passed
                else f"Only {completed}/{expected} steps completed"
            ),
        )

    def check_no_errors(self, result: ExecutionResult) -> ValidationCheck:
        failed = len(result.failed_steps)
        return ValidationCheck(
            name="no_errors",
            passed=failed == 0,
            message="No errors occurred" if failed == 0 else f"{failed} step(s) failed",
        )

    def check_reasonable_duration(self, result: ExecutionResult) -> ValidationCheck:
        estimate = result.plan.estimated_duration_ms
        passed = result.duration_ms <= estimate * self.duration_limit_factor
        return ValidationCheck(
            name="reasonable_duration",
            passed=passed,
            message=(
                f"Completed in {result.duration_ms:.0f}ms (estimated {estimate:.0f}ms)"
                if passed
                else f"Took {result.duration_ms:.0f}ms, exceeded "
                f"{self.duration_limit_factor:g}x estimate ({estimate:.0f}ms)"
            ),
        )

    def suggestions(self, result: ExecutionResult, validation: ValidationResult) -> list[str]:
        suggestions = [f"Address: {check.message}" for check in validation.failed_checks]

        failed_steps = result.failed_steps
        if failed_steps:
            suggestions.append(
                f"Retry failed steps: {', '.join(r.step.id for r in failed_steps)}"
            )

        if result.duration_ms > result.plan.estimated_duration_ms * self.optimize_suggestion_factor:
            suggestions.append(OPTIMIZE_SUGGESTION)

        return suggestions
