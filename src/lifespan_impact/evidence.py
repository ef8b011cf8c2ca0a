"""Study references backing each metric's risk curve."""

from types import MappingProxyType

from .models import EvidenceStrength, MetricType, StudyReference

_META = "meta-analysis"
_COHORT = "prospective cohort"
_POOLED = "pooled cohort analysis"

STUDY_REFERENCES: MappingProxyType[MetricType, StudyReference] = MappingProxyType(
    {
        MetricType.STEPS: StudyReference(
            citation=(
                "Paluch AE, et al. (2022). Daily steps and all-cause mortality: a "
                "meta-analysis of 15 international cohorts. Lancet Public Health."
            ),
            sample_size=47_471,
            follow_up_years=7.1,
            study_type=_META,
            reliability=EvidenceStrength.HIGH,
            effect_summary="Mortality falls progressively up to 8,000-10,000 steps/day.",
        ),
        MetricType.EXERCISE_MINUTES: StudyReference(
            citation=(
                "Moore SC, Lee IM, Weiderpass E, et al. (2016). Association of "
                "Leisure-Time Physical Activity With Risk of 26 Types of Cancer in "
                "1.44 Million Adults. JAMA Internal Medicine."
            ),
            sample_size=1_440_000,
            follow_up_years=11.0,
            study_type=_POOLED,
            reliability=EvidenceStrength.HIGH,
            effect_summary="150 min/week of activity lowers all-cause mortality by about 23%.",
        ),
        MetricType.SLEEP_HOURS: StudyReference(
            citation=(
                "Cappuccio FP, D'Elia L, Strazzullo P, Miller MA (2010). Sleep Duration "
                "and All-Cause Mortality: A Systematic Review and Meta-Analysis of "
                "Prospective Studies. Sleep."
            ),
            sample_size=1_382_999,
            follow_up_years=25.0,
            study_type=_META,
            reliability=EvidenceStrength.HIGH,
            effect_summary="Both short and long sleep raise mortality; 7-8 hours is lowest.",
        ),
        MetricType.RESTING_HEART_RATE: StudyReference(
            citation=(
                "Zhang D, Shen X, Qi X (2016). Resting heart rate and all-cause and "
                "cardiovascular mortality in the general population: a meta-analysis. "
                "CMAJ."
            ),
            sample_size=1_246_203,
            follow_up_years=10.0,
            study_type=_META,
            reliability=EvidenceStrength.HIGH,
            effect_summary="Each 10 bpm above 60 raises all-cause mortality by about 16%.",
        ),
        MetricType.HEART_RATE_VARIABILITY: StudyReference(
            citation=(
                "Hillebrand S, et al. (2013). Heart rate variability and first "
                "cardiovascular event in populations without known cardiovascular "
                "disease: meta-analysis and dose-response meta-regression. Europace."
            ),
            sample_size=21_988,
            follow_up_years=8.0,
            study_type=_META,
            reliability=EvidenceStrength.MODERATE,
            effect_summary="Low HRV is linked to a higher risk of first cardiovascular events.",
        ),
        MetricType.BODY_MASS: StudyReference(
            citation=(
                "Global BMI Mortality Collaboration (2016). Body-mass index and "
                "all-cause mortality: individual-participant-data meta-analysis of "
                "239 prospective studies. Lancet."
            ),
            sample_size=10_625_411,
            follow_up_years=13.7,
            study_type=_META,
            reliability=EvidenceStrength.MODERATE,
            effect_summary="Mortality is lowest at a healthy weight and rises in both directions.",
        ),
        MetricType.ACTIVE_ENERGY_BURNED: StudyReference(
            citation=(
                "Strain T, et al. (2020). Wearable-device-measured physical activity "
                "and future health risk. Nature Medicine."
            ),
            sample_size=96_476,
            follow_up_years=3.1,
            study_type=_COHORT,
            reliability=EvidenceStrength.LOW,
            effect_summary="Higher activity energy expenditure is associated with lower mortality.",
        ),
        MetricType.VO2_MAX: StudyReference(
            citation=(
                "Kodama S, et al. (2009). Cardiorespiratory fitness as a quantitative "
                "predictor of all-cause mortality and cardiovascular events in healthy "
                "men and women: a meta-analysis. JAMA."
            ),
            sample_size=102_980,
            follow_up_years=11.0,
            study_type=_META,
            reliability=EvidenceStrength.MODERATE,
            effect_summary="Each 1-MET gain in fitness lowers all-cause mortality by 13%.",
        ),
        MetricType.OXYGEN_SATURATION: StudyReference(
            citation=(
                "Vold ML, et al. (2015). Low oxygen saturation and mortality in an "
                "adult cohort: the Tromso study. BMC Pulmonary Medicine."
            ),
            sample_size=5_152,
            follow_up_years=7.0,
            study_type=_COHORT,
            reliability=EvidenceStrength.LOW,
            effect_summary="Saturation at or below 95% is associated with higher mortality.",
        ),
        MetricType.NUTRITION_QUALITY: StudyReference(
            citation=(
                "Schwingshackl L, Hoffmann G (2015). Diet Quality as Assessed by the "
                "Healthy Eating Index and All-Cause Mortality. Journal of the Academy "
                "of Nutrition and Dietetics."
            ),
            sample_size=1_020_642,
            follow_up_years=12.0,
            study_type=_META,
            reliability=EvidenceStrength.MODERATE,
            effect_summary="High-quality diets are associated with 22% lower all-cause mortality.",
        ),
        MetricType.SMOKING_STATUS: StudyReference(
            citation=(
                "Carter BD, Abnet CC, Feskanich D, et al. (2015). Smoking and "
                "Mortality: Beyond Established Causes. New England Journal of Medicine."
            ),
            sample_size=954_029,
            follow_up_years=11.0,
            study_type=_POOLED,
            reliability=EvidenceStrength.HIGH,
            effect_summary="Current smokers lose about a decade of life expectancy.",
        ),
        MetricType.ALCOHOL_CONSUMPTION: StudyReference(
            citation=(
                "Wood AM, et al. (2018). Risk thresholds for alcohol consumption: "
                "combined analysis of individual-participant data for 599,912 current "
                "drinkers in 83 prospective studies. Lancet."
            ),
            sample_size=599_912,
            follow_up_years=7.5,
            study_type=_META,
            reliability=EvidenceStrength.HIGH,
            effect_summary="All-cause mortality rises above roughly 100 g of alcohol per week.",
        ),
        MetricType.SOCIAL_CONNECTIONS_QUALITY: StudyReference(
            citation=(
                "Holt-Lunstad J, Smith TB, Layton JB (2010). Social Relationships and "
                "Mortality Risk: A Meta-analytic Review. PLOS Medicine."
            ),
            sample_size=308_849,
            follow_up_years=7.5,
            study_type=_META,
            reliability=EvidenceStrength.HIGH,
            effect_summary="Strong social relationships raise the odds of survival by 50%.",
        ),
        MetricType.STRESS_LEVEL: StudyReference(
            citation=(
                "Russ TC, et al. (2012). Association between psychological distress and "
                "mortality: individual participant pooled analysis of 10 prospective "
                "cohort studies. BMJ."
            ),
            sample_size=68_222,
            follow_up_years=8.2,
            study_type=_POOLED,
            reliability=EvidenceStrength.LOW,
            effect_summary="Even mild psychological distress raises all-cause mortality.",
        ),
    }
)

# Used for metrics without a catalogued study
DEFAULT_STRENGTH = EvidenceStrength.LOW


def study_for(metric_type: MetricType) -> StudyReference | None:
    """Look up the study backing a metric."""
    return STUDY_REFERENCES.get(metric_type)


def evidence_strength(metric_type: MetricType) -> EvidenceStrength:
    """Reliability tier for a metric's evidence."""
    study = STUDY_REFERENCES.get(metric_type)
    return study.reliability if study else DEFAULT_STRENGTH


def reliability_weight(metric_type: MetricType) -> float:
    """Weight applied to a metric's impact during aggregation."""
    return evidence_strength(metric_type).weight
