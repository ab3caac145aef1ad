"""
Pytest configuration and shared fixtures for the pet travel knowledge base tests.
"""
import copy

import pytest
from hypothesis import settings, Verbosity

settings.register_profile(
    "default",
    max_examples=100,
    deadline=5000,
    verbosity=Verbosity.normal,
)

settings.register_profile(
    "ci",
    max_examples=200,
    deadline=10000,
    verbosity=Verbosity.quiet,
)

settings.load_profile("default")


def rule_row(rule_id, dest, risk, pet, title, complexity="低", prep_time="6 months",
             unit="Department of Agriculture", link="https://www.agriculture.gov.au"):
    return {
        "Rule_ID": rule_id,
        "Dest_Code": dest,
        "Risk_Level": risk,
        "Pet_Type": pet,
        "Title": title,
        "Complexity": complexity,
        "Prep_Time": prep_time,
        "Contact_Unit": unit,
        "Contact_Link": link,
    }


SAMPLE_TABLES = {
    "COUNTRIES": [
        {"Code": "TW", "Name_TW": "台灣", "Name_EN": "Taiwan"},
        {"Code": "AU", "Name_TW": "澳洲", "Name_EN": "Australia"},
        {"Code": "JP", "Name_TW": "日本", "Name_EN": "Japan"},
        {"Code": "FR", "Name_TW": "法國", "Name_EN": "France"},
        {"Code": "NZ", "Name_TW": "紐西蘭", "Name_EN": "New Zealand"},
    ],
    "RISKS": [
        {"Dest_Code": "AU", "Origin_Code": "TW", "Risk_Level": "Low"},
        {"Dest_Code": "AU", "Origin_Code": "JP", "Risk_Level": "Group 2"},
    ],
    "RULES": [
        rule_row("1", "AU", "Low", "Dog", "Standard Entry"),
    ],
    "STEPS": [
        {"Rule_ID": "1", "Step_Order": "1", "Content": "Microchip", "Timeframe": "Day 0"},
    ],
    "REQS": [
        {"Rule_ID": "1", "Requirement": "ISO compatible microchip"},
    ],
}


@pytest.fixture
def sample_tables():
    """The TW/AU example data set, safe to mutate per test."""
    return copy.deepcopy(SAMPLE_TABLES)


@pytest.fixture
def make_rule_row():
    """Factory for RULES rows."""
    return rule_row
