"""
HOS Compliance API Serializers.

Provides serialization and validation for HOS compliance API endpoints.
Request serializers turn JSON into the engine's duty log and limits;
response serializers format HosStatus, HosCalculation and rest options
with hours rounded to two decimals.
"""

from rest_framework import serializers

from common.validators import validate_cycle_hours, validate_limit_hours
from .models import DutyInterval, DutyLog, DutyStatus, HosLimits
from .services import GapPolicy

HOURS_FIELD_OPTIONS = dict(max_digits=10, decimal_places=2)


class DutyIntervalSerializer(serializers.Serializer):
    """
    Serializer for one duty interval in a request.

    Status accepts either the enum value ("driving") or the ELD grid
    code ("D", "OFF", "SB", "ON").
    """

    status = serializers.CharField(help_text="Duty status value or ELD code")
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()
    location = serializers.CharField(
        max_length=200, required=False, allow_blank=True, default=""
    )
    remarks = serializers.CharField(
        max_length=200, required=False, allow_blank=True, default=""
    )
    personal_conveyance = serializers.BooleanField(required=False, default=False)
    yard_move = serializers.BooleanField(required=False, default=False)

    def validate_status(self, value):
        try:
            return DutyStatus.from_code(value)
        except ValueError:
            raise serializers.ValidationError(f"Invalid duty status: {value}")

    def to_interval(self, data):
        return DutyInterval(**data)


class HosLimitsSerializer(serializers.Serializer):
    """Optional overrides of the default property-carrying limits."""

    driving_limit = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, validators=[validate_limit_hours]
    )
    window_limit = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, validators=[validate_limit_hours]
    )
    break_required = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, validators=[validate_limit_hours]
    )
    break_duration = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, validators=[validate_limit_hours]
    )
    off_duty_required = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, validators=[validate_limit_hours]
    )
    cycle_limit = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, validators=[validate_cycle_hours]
    )
    cycle_days = serializers.IntegerField(required=False, min_value=1, max_value=14)
    cycle_restart_hours = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, validators=[validate_cycle_hours]
    )
    apply_cycle_restart = serializers.BooleanField(required=False)


class HOSCalculationRequestSerializer(serializers.Serializer):
    """
    Serializer for HOS calculation requests.

    Validates input data for HOS calculations and provides
    clean data for service layer processing.
    """

    as_of = serializers.DateTimeField(help_text="Instant to calculate for")
    driver_name = serializers.CharField(
        max_length=100, required=False, allow_blank=True, default=""
    )
    intervals = DutyIntervalSerializer(many=True, allow_empty=True)
    limits = HosLimitsSerializer(required=False)
    gap_policy = serializers.ChoiceField(choices=GapPolicy.CHOICES, required=False)

    def validate(self, data):
        """Cross-field validation of the limit overrides."""
        limits = data.get("limits")
        if limits:
            window = limits.get("window_limit", HosLimits.window_limit)
            driving = limits.get("driving_limit", HosLimits.driving_limit)
            if driving > window:
                raise serializers.ValidationError(
                    {"limits": "Driving limit cannot exceed the duty window"}
                )
        return data

    def get_duty_log(self) -> DutyLog:
        interval_serializer = self.fields["intervals"].child
        return DutyLog(
            intervals=tuple(
                interval_serializer.to_interval(item)
                for item in self.validated_data["intervals"]
            ),
            driver_name=self.validated_data.get("driver_name", ""),
        )

    def get_limits(self, default: HosLimits) -> HosLimits:
        overrides = self.validated_data.get("limits")
        if not overrides:
            return default
        values = {
            name: getattr(default, name)
            for name in HosLimitsSerializer().fields
        }
        values.update(overrides)
        return HosLimits(**values)


class RestPeriodSerializer(serializers.Serializer):
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()
    duration = serializers.DecimalField(**HOURS_FIELD_OPTIONS)
    type = serializers.CharField()


class SplitSleeperPairingSerializer(serializers.Serializer):
    first_period = RestPeriodSerializer()
    second_period = RestPeriodSerializer()
    combination = serializers.CharField()
    location = serializers.CharField(allow_blank=True)


class CycleDaySerializer(serializers.Serializer):
    date = serializers.DateField()
    total_hours = serializers.DecimalField(**HOURS_FIELD_OPTIONS)
    driving_hours = serializers.DecimalField(**HOURS_FIELD_OPTIONS)
    on_duty_hours = serializers.DecimalField(**HOURS_FIELD_OPTIONS)
    remaining_hours = serializers.DecimalField(**HOURS_FIELD_OPTIONS)


class ViolationSerializer(serializers.Serializer):
    """Serializer for a detected HOS violation."""

    type = serializers.CharField()
    description = serializers.CharField()
    timestamp = serializers.DateTimeField()
    regulation = serializers.CharField(allow_blank=True)
    limit_hours = serializers.DecimalField(allow_null=True, **HOURS_FIELD_OPTIONS)


class HOSStatusSerializer(serializers.Serializer):
    """
    Serializer for HosStatus.

    Hours accumulated since the last qualifying reset, the last
    30-minute break and across the rolling cycle.
    """

    as_of = serializers.DateTimeField()
    current_cycle_hours = serializers.DecimalField(**HOURS_FIELD_OPTIONS)
    driving_hours_today = serializers.DecimalField(**HOURS_FIELD_OPTIONS)
    on_duty_hours_today = serializers.DecimalField(**HOURS_FIELD_OPTIONS)
    hours_since_last_break = serializers.DecimalField(**HOURS_FIELD_OPTIONS)
    hours_in_current_window = serializers.DecimalField(**HOURS_FIELD_OPTIONS)
    last_rest_period = RestPeriodSerializer(allow_null=True)
    cycle_hours_last_8_days = CycleDaySerializer(many=True)
    reset_boundary = serializers.DateTimeField(allow_null=True)
    window_start = serializers.DateTimeField(allow_null=True)
    last_break_end = serializers.DateTimeField(allow_null=True)
    split_pairing = SplitSleeperPairingSerializer(allow_null=True)


class HOSCalculationResponseSerializer(serializers.Serializer):
    """
    Serializer for HosCalculation.

    Formats availability results from HOSCalculatorService
    for API response.
    """

    can_drive = serializers.BooleanField()
    available_driving_hours = serializers.DecimalField(**HOURS_FIELD_OPTIONS)
    available_window_hours = serializers.DecimalField(**HOURS_FIELD_OPTIONS)
    cycle_hours_remaining = serializers.DecimalField(**HOURS_FIELD_OPTIONS)
    next_break_time = serializers.DateTimeField(allow_null=True)
    next_rest_time = serializers.DateTimeField(allow_null=True)
    violations = ViolationSerializer(many=True)
    split_berth_eligible = serializers.BooleanField()
    personal_conveyance_available = serializers.BooleanField()
    split_sleeper = SplitSleeperPairingSerializer(allow_null=True)


class RestOptionSerializer(serializers.Serializer):
    """Serializer for a rest option that restores driving eligibility."""

    type = serializers.CharField()
    duration_hours = serializers.DecimalField(**HOURS_FIELD_OPTIONS)
    description = serializers.CharField()
    regulation = serializers.CharField()
    restores = serializers.ListField(child=serializers.CharField())
