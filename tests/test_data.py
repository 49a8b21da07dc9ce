"""Tests for file parsing, validation and sample data."""

import json
import sys
import os
from datetime import date
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pandas as pd
import pytest

from data.loader import (
    load_csv_directory,
    load_file,
    load_multi_sheet_excel,
    load_scenario_json,
    parse_estimates,
    parse_holidays,
    parse_portfolio,
    parse_assignments,
    parse_projects,
    parse_resources,
    parse_teams,
)
from data.sample_data import (
    generate_sample_csvs,
    generate_sample_excel,
    generate_sample_frames,
    generate_sample_scenarios,
)
from data.validator import (
    validate_assignments,
    validate_estimates,
    validate_portfolio,
    validate_projects,
    validate_pto,
    validate_resources,
    validate_teams,
)


class TestValidator:
    def test_sample_portfolio_is_valid(self):
        result = validate_portfolio(generate_sample_frames())
        assert result.is_valid, result.errors
        assert result.errors == []

    def test_missing_columns(self):
        result = validate_teams(pd.DataFrame([{"Team ID": "T1"}]))
        assert not result.is_valid
        assert "Missing required columns" in result.errors[0]

    def test_negative_fte(self):
        df = generate_sample_frames()["teams"]
        df.loc[0, "Developer FTE"] = -1
        result = validate_teams(df)
        assert not result.is_valid
        assert any("Developer FTE" in e for e in result.errors)

    def test_duplicate_project_ids(self):
        df = generate_sample_frames()["projects"]
        df.loc[1, "Project ID"] = df.loc[0, "Project ID"]
        assert not validate_projects(df).is_valid

    def test_unknown_status(self):
        df = generate_sample_frames()["projects"]
        df.loc[0, "Status"] = "paused"
        result = validate_projects(df)
        assert any("status" in e for e in result.errors)

    def test_unknown_workflow_status(self):
        df = generate_sample_frames()["projects"]
        df["Workflow Status"] = "Cost Review"
        assert validate_projects(df).is_valid
        df.loc[0, "Workflow Status"] = "shipped"
        result = validate_projects(df)
        assert any("workflow status" in e for e in result.errors)

    def test_required_skill_level_range(self):
        df = generate_sample_frames()["projects"]
        df.loc[0, "Required Skills"] = "React:9"
        result = validate_projects(df)
        assert not result.is_valid
        assert any("React:9" in e for e in result.errors)

    def test_resource_checks(self):
        df = generate_sample_frames()["resources"]
        assert validate_resources(df).is_valid
        df.loc[1, "Resource ID"] = df.loc[0, "Resource ID"]
        df.loc[2, "Skills"] = "ABAP:0"
        result = validate_resources(df)
        assert not result.is_valid
        assert len(result.errors) == 2

    def test_assignment_ranges(self):
        df = pd.DataFrame([{"Resource ID": "R1", "Project ID": "P1", "Allocation %": 150,
                            "Start Week": 4, "End Week": 2}])
        result = validate_assignments(df)
        assert not result.is_valid
        assert len(result.errors) == 2

    def test_assignment_for_unknown_resource(self):
        frames = generate_sample_frames()
        frames["assignments"] = pd.concat([
            frames["assignments"],
            pd.DataFrame([{"Resource ID": "R-99", "Project ID": "P01", "Allocation %": 10,
                           "Start Week": 0, "End Week": 1}]),
        ], ignore_index=True)
        result = validate_portfolio(frames)
        assert not result.is_valid
        assert any("R-99" in e for e in result.errors)

    def test_estimates_need_hours(self):
        result = validate_estimates(pd.DataFrame([{"Project ID": "P1", "Team ID": "T1"}]))
        assert not result.is_valid

    def test_pto_range(self):
        df = pd.DataFrame([{"Team ID": "T1", "Person Name": "A", "Start Week": 5, "End Week": 3}])
        assert not validate_pto(df).is_valid

    def test_cross_file_warnings(self):
        frames = generate_sample_frames()
        frames["estimates"] = pd.concat([
            frames["estimates"],
            pd.DataFrame([{"Project ID": "P01", "Team ID": "T-GHOST", "Development Hours": 10}]),
        ], ignore_index=True)
        result = validate_portfolio(frames)
        assert result.is_valid
        assert any("T-GHOST" in w for w in result.warnings)


class TestLoader:
    def test_parse_sample_portfolio(self):
        portfolio = parse_portfolio(generate_sample_frames())
        assert len(portfolio["teams"]) == 7
        assert len(portfolio["projects"]) == 20
        assert len(portfolio["holidays"]) == 8
        assert len(portfolio["pto_entries"]) == 3

        web = portfolio["teams"][0]
        assert web.team_id == "T-WEB"
        assert web.developer_fte == 4
        assert "GraphQL" in web.skills

        sap = next(p for p in portfolio["projects"] if p.project_id == "P02")
        assert [e.team_id for e in sap.team_estimates] == ["T-ERP", "T-INFRA", "T-SEC", "T-DATA"]
        assert sap.status == "active"
        assert [s.name for s in sap.required_skills] == ["SAP S/4HANA", "ABAP"]
        assert [s.min_proficiency for s in sap.required_skills] == [4, 4]
        assert sap.workflow_status == "submitted"

        assert len(portfolio["resources"]) == 13
        maria = next(r for r in portfolio["resources"] if r.resource_id == "R-03")
        assert maria.proficiency("ABAP") == 5
        assert len(portfolio["assignments"]) == 15

    def test_dev_hours_expanded_by_estimator(self):
        df = pd.DataFrame([{"Project ID": "P1", "Team ID": "T1", "Dev Hours": 240}])
        estimate = parse_estimates(df)["P1"][0]
        assert estimate.development == 240
        assert estimate.total_hours == 400

    def test_optional_project_columns(self):
        df = pd.DataFrame([{"Project ID": "P1", "Project Name": "Thing", "Priority": 3}])
        project = parse_projects(df)[0]
        assert project.status == "not_started"
        assert project.start_week_offset == 0
        assert project.team_estimates == []

    def test_parse_resources_with_levels(self):
        df = pd.DataFrame([{"Resource ID": "R1", "Name": "Priya", "Team ID": "T1",
                            "Skills": "ABAP:5; SAP S/4HANA"}])
        person = parse_resources(df)[0]
        assert person.role == ""
        assert [(s.name, s.proficiency) for s in person.skills] == [("ABAP", 5), ("SAP S/4HANA", 3)]

    def test_parse_assignments(self):
        df = pd.DataFrame([{"Resource ID": "R1", "Project ID": "P1", "Allocation %": 50,
                            "Start Week": 2, "End Week": 8, "Role": "architect"}])
        assignment = parse_assignments(df)[0]
        assert assignment.allocation_pct == 50
        assert (assignment.start_week, assignment.end_week) == (2, 8)
        assert assignment.role == "architect"

    def test_workflow_status_column(self):
        df = pd.DataFrame([{"Project ID": "P1", "Project Name": "Thing", "Priority": 3,
                            "Workflow Status": "Cost Review"}])
        assert parse_projects(df)[0].workflow_status == "cost_review"

    def test_team_defaults_for_missing_roles(self):
        df = pd.DataFrame([{"Team ID": "T1", "Team Name": "Solo", "Developer FTE": 1,
                            "KLO/TLM Hours/Week": 0, "Admin %": 0}])
        team = parse_teams(df)[0]
        assert team.total_fte == 1
        assert team.skills == ()

    def test_holiday_week_from_date(self):
        df = pd.DataFrame([{"Holiday Name": "Independence Day", "Date": "2026-07-03"}])
        holiday = parse_holidays(df, planning_start=date(2026, 1, 5))[0]
        assert holiday.week == 25
        assert holiday.holiday_date == date(2026, 7, 3)

    def test_holiday_without_week_or_start(self):
        df = pd.DataFrame([{"Holiday Name": "Mystery", "Date": "2026-07-03"}])
        with pytest.raises(ValueError):
            parse_holidays(df)

    def test_unsupported_format(self):
        with pytest.raises(ValueError):
            load_file("portfolio.txt")

    def test_csv_directory_roundtrip(self, tmp_path):
        generate_sample_csvs(str(tmp_path))
        frames = load_csv_directory(str(tmp_path))
        portfolio = parse_portfolio(frames)
        assert len(portfolio["projects"]) == 20
        assert portfolio["holidays"][0].recurring

    def test_csv_directory_missing_required(self, tmp_path):
        with pytest.raises(ValueError):
            load_csv_directory(str(tmp_path))

    def test_workbook_roundtrip(self, tmp_path):
        path = generate_sample_excel(str(tmp_path))
        frames = load_multi_sheet_excel(path)
        assert set(frames) == {"teams", "projects", "estimates", "holidays", "pto", "resources", "assignments"}
        assert len(frames["estimates"]) == len(generate_sample_frames()["estimates"])

    def test_workbook_without_optional_sheets(self, tmp_path):
        path = tmp_path / "minimal.xlsx"
        sample = generate_sample_frames()
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            sample["teams"].to_excel(writer, sheet_name="Team Master", index=False)
            sample["projects"].to_excel(writer, sheet_name="PORTFOLIO", index=False)
            sample["estimates"].to_excel(writer, sheet_name="Estimates", index=False)
        frames = load_multi_sheet_excel(path)
        assert frames["holidays"].empty
        portfolio = parse_portfolio(frames)
        assert portfolio["holidays"] == []
        assert portfolio["resources"] == [] and portfolio["assignments"] == []

    def test_scenario_json(self, tmp_path):
        path = tmp_path / "overrides.json"
        path.write_text(json.dumps({
            "scenario_id": "aug",
            "name": "Augmentation",
            "contractors": [{"team_id": "T-ERP", "role_key": "developer", "fte": 2, "weeks": 26}],
            "priority_overrides": {"P15": 25},
        }))
        scenario = load_scenario_json(path)
        assert scenario.name == "Augmentation"
        assert scenario.contractors[0].fte == 2
        assert scenario.override_map() == {"P15": 25}

    def test_scenario_json_bad_contractor(self, tmp_path):
        path = tmp_path / "overrides.json"
        path.write_text(json.dumps({"contractors": [{"team_id": "T1", "role_key": "wizard", "fte": 1, "weeks": 1}]}))
        with pytest.raises(ValueError):
            load_scenario_json(path)


class TestSampleScenarios:
    def test_reference_sample_projects(self):
        project_ids = set(generate_sample_frames()["projects"]["Project ID"])
        for scenario in generate_sample_scenarios():
            assert set(scenario.override_map()) <= project_ids


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
