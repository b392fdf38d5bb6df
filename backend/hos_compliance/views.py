"""
HOS Compliance API Views.

Provides REST API endpoints for HOS status, availability and required
rest calculations. Requests carry the full duty log; nothing is
persisted between calls.
"""

import logging

from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .conf import HOSEngineConfig
from .serializers import (
    HOSCalculationRequestSerializer,
    HOSCalculationResponseSerializer,
    HOSStatusSerializer,
    RestOptionSerializer,
)
from .services import DutyLogValidationError, HOSCalculationError

logger = logging.getLogger(__name__)


class HOSCalculationViewSet(viewsets.ViewSet):
    """
    ViewSet for HOS calculations.

    Provides endpoints for calculating HOS compliance
    from a submitted duty log.
    """

    permission_classes = [AllowAny]

    def current_status(self, request):
        """
        Calculate HOS status as of an instant.

        Request Body:
            as_of (datetime): Instant to calculate for
            intervals (list): Duty intervals, oldest first
            limits (dict, optional): Limit overrides
            gap_policy (str, optional): "reject" or "synthesize_off_duty"
        """
        return self._handle(request, "HOS status calculation", self._status_payload)

    def calculate(self, request):
        """
        Calculate HOS status and availability.

        Request Body: Same as status endpoint
        """
        return self._handle(request, "HOS calculation", self._calculation_payload)

    def required_rest(self, request):
        """
        Calculate rest options that restore driving eligibility.

        Request Body: Same as status endpoint
        """
        return self._handle(request, "Required rest calculation", self._rest_payload)

    def _handle(self, request, operation, build_payload):
        serializer = HOSCalculationRequestSerializer(data=request.data)

        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            config = HOSEngineConfig.from_settings()
            limits = serializer.get_limits(config.limits)
            calculator = config.calculator(
                limits=limits,
                gap_policy=serializer.validated_data.get("gap_policy"),
            )
            log = serializer.get_duty_log()
            payload = build_payload(calculator, log, serializer.validated_data["as_of"])
            payload["limits"] = limits.as_dict()

            logger.info(f"{operation} completed for {len(log)} intervals")
            return Response(payload)

        except DutyLogValidationError as e:
            logger.warning(f"{operation} rejected: {str(e)}")
            return Response(
                {
                    "error": "Invalid duty log",
                    "details": str(e),
                    "interval_index": e.interval_index,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )
        except HOSCalculationError as e:
            logger.error(f"{operation} failed: {str(e)}")
            return Response(
                {"error": f"{operation} failed", "details": str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

    def _status_payload(self, calculator, log, as_of):
        hos_status = calculator.compute_status(log, as_of)
        return {"status": HOSStatusSerializer(hos_status).data}

    def _calculation_payload(self, calculator, log, as_of):
        hos_status, calculation = calculator.calculate(log, as_of)
        return {
            "status": HOSStatusSerializer(hos_status).data,
            "calculation": HOSCalculationResponseSerializer(calculation).data,
        }

    def _rest_payload(self, calculator, log, as_of):
        hos_status, calculation = calculator.calculate(log, as_of)
        options = calculator.break_planner.plan_required_rest(
            hos_status, calculation, calculator.limits
        )
        return {
            "calculation": HOSCalculationResponseSerializer(calculation).data,
            "rest_options": RestOptionSerializer(options, many=True).data,
        }
