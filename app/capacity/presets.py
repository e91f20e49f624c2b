"""
Capacity presets — condition profiles resolved to load configurations.

A profile combines three independent knobs:

- **capacity level** → risk thresholds,
- **sensitivity** → symptom multiplier,
- **recovery window** → decay rate (lower = load lingers longer).

Condition presets are named starting points for common energy-limiting
conditions.  They are *not* clinical recommendations.

    capacity   low 20/40/60    medium 25/50/75    high 30/60/80
    sensitivity sensitive 1.5  standard 1.0       resilient 0.7
    recovery   12h 0.85        24h 0.7            48h 0.55        72h 0.4
"""

from __future__ import annotations

from app.schemas.calibration import (
    CapacityLevel,
    CapacityProfile,
    ConditionPreset,
    PresetDescription,
    ProfileUpdate,
    RecoveryWindow,
    SensitivityProfile,
)
from app.schemas.load import LoadConfiguration, LoadThresholds

CAPACITY_THRESHOLDS: dict[CapacityLevel, LoadThresholds] = {
    CapacityLevel.LOW: LoadThresholds(safe=20.0, caution=40.0, high=60.0, critical=60.0),
    CapacityLevel.MEDIUM: LoadThresholds(safe=25.0, caution=50.0, high=75.0, critical=75.0),
    CapacityLevel.HIGH: LoadThresholds(safe=30.0, caution=60.0, high=80.0, critical=80.0),
}

SYMPTOM_MULTIPLIERS: dict[SensitivityProfile, float] = {
    SensitivityProfile.SENSITIVE: 1.5,
    SensitivityProfile.STANDARD: 1.0,
    SensitivityProfile.RESILIENT: 0.7,
}

DECAY_RATES: dict[RecoveryWindow, float] = {
    RecoveryWindow.QUICK: 0.85,
    RecoveryWindow.STANDARD: 0.7,
    RecoveryWindow.MODERATE: 0.55,
    RecoveryWindow.EXTENDED: 0.4,
}

RECOVERY_HOURS: dict[RecoveryWindow, int] = {
    RecoveryWindow.QUICK: 12,
    RecoveryWindow.STANDARD: 24,
    RecoveryWindow.MODERATE: 48,
    RecoveryWindow.EXTENDED: 72,
}

# preset -> (capacity, sensitivity, recovery window, display name, description)
_PRESETS: dict[ConditionPreset, tuple[CapacityLevel, SensitivityProfile, RecoveryWindow, str, str]] = {
    ConditionPreset.STANDARD: (
        CapacityLevel.MEDIUM, SensitivityProfile.STANDARD, RecoveryWindow.STANDARD,
        "Standard", "Default settings for general symptom tracking",
    ),
    ConditionPreset.MECFS: (
        CapacityLevel.LOW, SensitivityProfile.SENSITIVE, RecoveryWindow.EXTENDED,
        "ME/CFS", "Post-exertional malaise aware, extended recovery",
    ),
    ConditionPreset.FIBROMYALGIA: (
        CapacityLevel.LOW, SensitivityProfile.SENSITIVE, RecoveryWindow.MODERATE,
        "Fibromyalgia", "Pain sensitivity focus, moderate recovery",
    ),
    ConditionPreset.PCOS: (
        CapacityLevel.MEDIUM, SensitivityProfile.STANDARD, RecoveryWindow.STANDARD,
        "PCOS", "Hormone cycle aware, standard recovery",
    ),
    ConditionPreset.PTSD: (
        CapacityLevel.MEDIUM, SensitivityProfile.SENSITIVE, RecoveryWindow.MODERATE,
        "PTSD", "Stress-sensitive, quick-moderate recovery",
    ),
    ConditionPreset.LONG_COVID: (
        CapacityLevel.LOW, SensitivityProfile.SENSITIVE, RecoveryWindow.EXTENDED,
        "Long COVID", "Fatigue focus, extended recovery periods",
    ),
    ConditionPreset.AUTOIMMUNE: (
        CapacityLevel.LOW, SensitivityProfile.STANDARD, RecoveryWindow.MODERATE,
        "Autoimmune conditions", "Flare-aware, variable recovery",
    ),
    ConditionPreset.CUSTOM: (
        CapacityLevel.MEDIUM, SensitivityProfile.STANDARD, RecoveryWindow.STANDARD,
        "Custom settings", "Manually configure all settings",
    ),
}


def profile_for_preset(preset: ConditionPreset) -> CapacityProfile:
    capacity, sensitivity, window, _, _ = _PRESETS[preset]
    return CapacityProfile(preset=preset, capacity=capacity, sensitivity=sensitivity, recovery_window=window)


def describe_presets() -> list[PresetDescription]:
    return [
        PresetDescription(
            preset=preset, display_name=name, description=description,
            capacity=capacity, sensitivity=sensitivity, recovery_window=window,
        )
        for preset, (capacity, sensitivity, window, name, description) in _PRESETS.items()
    ]


def matches_preset(profile: CapacityProfile) -> bool:
    if profile.preset == ConditionPreset.CUSTOM:
        return True
    expected = profile_for_preset(profile.preset)
    return (profile.capacity == expected.capacity and profile.sensitivity == expected.sensitivity
            and profile.recovery_window == expected.recovery_window)


def apply_profile_update(current: CapacityProfile, update: ProfileUpdate) -> CapacityProfile:
    """Merge *update* into *current*.

    A non-custom preset overwrites all three components first; explicit
    component values are then applied on top, and any mismatch with the
    preset flips the profile to ``custom``.
    """
    profile = current
    if update.preset is not None:
        if update.preset == ConditionPreset.CUSTOM:
            profile = profile.model_copy(update={"preset": ConditionPreset.CUSTOM})
        else:
            profile = profile_for_preset(update.preset)

    changes = {
        key: value
        for key, value in (("capacity", update.capacity), ("sensitivity", update.sensitivity),
                           ("recovery_window", update.recovery_window))
        if value is not None
    }
    if changes:
        profile = profile.model_copy(update=changes)

    if not matches_preset(profile):
        profile = profile.model_copy(update={"preset": ConditionPreset.CUSTOM})
    return profile


def configuration_for_profile(profile: CapacityProfile) -> LoadConfiguration:
    """Resolve *profile* to a :class:`LoadConfiguration` with unscaled thresholds."""
    return LoadConfiguration(
        thresholds=CAPACITY_THRESHOLDS[profile.capacity],
        decay_rate=DECAY_RATES[profile.recovery_window],
        symptom_multiplier=SYMPTOM_MULTIPLIERS[profile.sensitivity],
    )
