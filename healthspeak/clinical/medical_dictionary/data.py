# Base medical dictionary.
# Extend these tables (or use MedicalDictionary.add_*) without touching the routers.

from __future__ import annotations

from healthspeak.clinical.medical_dictionary.models import DrugInfo, MedicalAbbreviation

MEDICAL_ABBREVIATIONS: tuple[MedicalAbbreviation, ...] = (
    # frequency
    MedicalAbbreviation("bid", "twice a day", "frequency", "Take medication two times per day",
                        ("Take 1 tablet bid", "Apply cream bid")),
    MedicalAbbreviation("tid", "three times a day", "frequency", "Take medication three times per day",
                        ("Take 1 capsule tid", "Use drops tid")),
    MedicalAbbreviation("qid", "four times a day", "frequency", "Take medication four times per day",
                        ("Take 1 tablet qid", "Apply ointment qid")),
    MedicalAbbreviation("qd", "once a day", "frequency", "Take medication once per day",
                        ("Take 1 tablet qd", "Apply patch qd")),
    MedicalAbbreviation("q12h", "every 12 hours", "frequency", "Take medication every 12 hours",
                        ("Take 1 tablet q12h", "Use inhaler q12h")),
    MedicalAbbreviation("q8h", "every 8 hours", "frequency", "Take medication every 8 hours",
                        ("Take 1 capsule q8h", "Apply cream q8h")),
    MedicalAbbreviation("q6h", "every 6 hours", "frequency", "Take medication every 6 hours",
                        ("Take 1 tablet q6h", "Use drops q6h")),
    MedicalAbbreviation("q4h", "every 4 hours", "frequency", "Take medication every 4 hours",
                        ("Take 1 tablet q4h", "Apply ointment q4h")),
    MedicalAbbreviation("prn", "as needed", "frequency", "Take medication only when needed",
                        ("Take 1 tablet prn pain", "Use inhaler prn shortness of breath")),
    # timing
    MedicalAbbreviation("ac", "before meals", "timing", "Take medication before eating",
                        ("Take 1 tablet ac", "Take 30 minutes ac")),
    MedicalAbbreviation("pc", "after meals", "timing", "Take medication after eating",
                        ("Take 1 tablet pc", "Take 1 hour pc")),
    MedicalAbbreviation("hs", "at bedtime", "timing", "Take medication before going to sleep",
                        ("Take 1 tablet hs", "Apply cream hs")),
    # route
    MedicalAbbreviation("po", "by mouth", "route", "Take medication orally",
                        ("Take 1 tablet po", "Take syrup po")),
    MedicalAbbreviation("iv", "intravenous", "route", "Given through a vein",
                        ("Administer iv", "Give medication iv")),
    MedicalAbbreviation("im", "intramuscular", "route", "Given as an injection into muscle",
                        ("Give injection im", "Administer vaccine im")),
    MedicalAbbreviation("sc", "subcutaneous", "route", "Given as an injection under the skin",
                        ("Give insulin sc", "Administer injection sc")),
    MedicalAbbreviation("sl", "under the tongue", "route", "Place medication under tongue to dissolve",
                        ("Place tablet sl", "Use spray sl")),
    # dosage
    MedicalAbbreviation("mg", "milligrams", "dosage", "Unit of measurement for medication strength",
                        ("Take 500mg", "Apply 10mg cream")),
    MedicalAbbreviation("mcg", "micrograms", "dosage", "Unit of measurement for very small doses",
                        ("Take 25mcg", "Use 100mcg inhaler")),
    MedicalAbbreviation("ml", "milliliters", "dosage", "Unit of measurement for liquid medications",
                        ("Take 5ml syrup", "Use 2ml drops")),
    # form
    MedicalAbbreviation("caps", "capsules", "form", "Medication in capsule form",
                        ("Take 2 caps", "Swallow caps whole")),
    MedicalAbbreviation("tabs", "tablets", "form", "Medication in tablet form",
                        ("Take 1 tabs", "Crush tabs if needed")),
)


DRUG_DATABASE: tuple[DrugInfo, ...] = (
    DrugInfo(
        name="paracetamol",
        generic_name="acetaminophen",
        brand_names=("Tylenol", "Panadol", "Crocin", "Dolo"),
        category="analgesic",
        common_dosages=("500mg", "650mg", "1000mg"),
        common_forms=("tablet", "syrup", "injection"),
        common_instructions=(
            "Take with or without food",
            "Do not exceed 4000mg per day",
            "Take every 4-6 hours as needed",
        ),
        warnings=(
            "Do not exceed recommended dose",
            "Avoid alcohol while taking this medication",
            "Consult doctor if symptoms persist",
        ),
        side_effects=("Nausea", "Stomach upset", "Allergic reactions (rare)"),
        interactions=("Warfarin", "Alcohol"),
    ),
    DrugInfo(
        name="ibuprofen",
        generic_name="ibuprofen",
        brand_names=("Advil", "Motrin", "Brufen", "Combiflam"),
        category="NSAID",
        common_dosages=("200mg", "400mg", "600mg"),
        common_forms=("tablet", "capsule", "syrup"),
        common_instructions=(
            "Take with food to reduce stomach upset",
            "Take every 6-8 hours as needed",
            "Do not exceed 1200mg per day without doctor supervision",
        ),
        warnings=("May cause stomach bleeding", "Avoid if allergic to aspirin", "Use with caution in heart disease"),
        side_effects=("Stomach upset", "Heartburn", "Dizziness", "Headache"),
        interactions=("Warfarin", "ACE inhibitors", "Diuretics"),
    ),
    DrugInfo(
        name="amoxicillin",
        generic_name="amoxicillin",
        brand_names=("Amoxil", "Augmentin", "Moxikind"),
        category="antibiotic",
        common_dosages=("250mg", "500mg", "875mg"),
        common_forms=("capsule", "tablet", "syrup"),
        common_instructions=(
            "Take with or without food",
            "Complete the full course even if feeling better",
            "Take at evenly spaced intervals",
        ),
        warnings=(
            "Complete full course of treatment",
            "Inform doctor of any allergies",
            "May reduce effectiveness of birth control",
        ),
        side_effects=("Diarrhea", "Nausea", "Vomiting", "Skin rash"),
        interactions=("Methotrexate", "Oral contraceptives"),
    ),
    DrugInfo(
        name="metformin",
        generic_name="metformin",
        brand_names=("Glucophage", "Glycomet", "Obimet"),
        category="antidiabetic",
        common_dosages=("500mg", "850mg", "1000mg"),
        common_forms=("tablet", "extended-release tablet"),
        common_instructions=(
            "Take with meals to reduce stomach upset",
            "Start with low dose and gradually increase",
            "Monitor blood sugar regularly",
        ),
        warnings=(
            "May cause lactic acidosis (rare but serious)",
            "Inform doctor before any surgery or medical procedures",
            "Regular kidney function monitoring required",
        ),
        side_effects=("Nausea", "Diarrhea", "Metallic taste", "Stomach upset"),
        interactions=("Alcohol", "Contrast dyes", "Diuretics"),
    ),
    DrugInfo(
        name="atorvastatin",
        generic_name="atorvastatin",
        brand_names=("Lipitor", "Atorlip", "Storvas"),
        category="statin",
        common_dosages=("10mg", "20mg", "40mg", "80mg"),
        common_forms=("tablet",),
        common_instructions=(
            "Take once daily, preferably in the evening",
            "Can be taken with or without food",
            "Regular cholesterol monitoring required",
        ),
        warnings=("May cause muscle pain or weakness", "Avoid grapefruit juice", "Regular liver function tests needed"),
        side_effects=("Muscle pain", "Headache", "Nausea", "Constipation"),
        interactions=("Grapefruit juice", "Cyclosporine", "Gemfibrozil"),
    ),
)
