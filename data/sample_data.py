"""Generate synthetic datasets for the IT Portfolio Capacity Planner."""

import os
from typing import List

import pandas as pd

from models.scenario import Contractor, PriorityOverride, Scenario
from config.defaults import ROLE_COLUMN_LABELS

# team_id, name, {role: fte}, klo/tlm hours, admin %, skills
_TEAMS = [
    ("T-WEB", "Web Platform",
     {"pm": 1, "product_manager": 0.5, "business_analyst": 0.5, "scrum_master": 0.5,
      "architect": 1, "developer": 4, "qa": 1.5, "devops": 1},
     15, 20, "React; TypeScript; Node.js; AWS; GraphQL"),
    ("T-BIZ", "Business Applications",
     {"pm": 1, "product_manager": 0.5, "business_analyst": 1.5, "scrum_master": 0.5,
      "architect": 0.5, "developer": 3.5, "qa": 1.5, "devops": 0.5, "dba": 0.5},
     20, 22, "Salesforce; .NET; SQL Server; Power Platform; ServiceNow"),
    ("T-ERP", "ERP & Supply Chain",
     {"pm": 1.5, "business_analyst": 2, "architect": 1, "developer": 5, "qa": 2,
      "devops": 1, "dba": 1},
     30, 18, "SAP S/4HANA; ABAP; SAP BTP; EDI; Oracle"),
    ("T-DATA", "Data & Analytics",
     {"pm": 0.5, "product_manager": 0.5, "business_analyst": 1, "architect": 1,
      "developer": 3, "qa": 1, "devops": 0.5, "dba": 1.5},
     12, 20, "Snowflake; dbt; Python; Tableau; Spark; Airflow"),
    ("T-INFRA", "Infrastructure & Cloud",
     {"pm": 0.5, "architect": 1, "developer": 2, "qa": 0.5, "devops": 3},
     40, 15, "AWS; Azure; Terraform; Kubernetes; Linux; Networking"),
    ("T-SEC", "Cybersecurity",
     {"pm": 0.5, "business_analyst": 0.5, "architect": 1, "developer": 2, "qa": 1, "devops": 1},
     20, 20, "SIEM; IAM; Penetration Testing; Zero Trust; Compliance"),
    ("T-MOB", "Mobile & Digital",
     {"pm": 0.5, "product_manager": 1, "business_analyst": 0.5, "scrum_master": 0.5,
      "architect": 0.5, "developer": 3, "qa": 1, "devops": 0.5},
     10, 20, "React Native; Swift; Kotlin; Firebase; Flutter"),
]

# project_id, name, priority, status, start week, business value, risk, required skills
_PROJECTS = [
    ("P01", "Customer Portal Redesign", 1, "active", 0, "critical", "medium", "React; TypeScript; AWS"),
    ("P02", "SAP S/4HANA Migration", 2, "active", 0, "critical", "high", "SAP S/4HANA:4; ABAP:4"),
    ("P03", "Data Lakehouse Platform", 3, "in_planning", 2, "high", "medium", "Snowflake; dbt; Python"),
    ("P04", "Zero Trust Security Program", 4, "active", 0, "critical", "high", "Zero Trust:4; IAM:3"),
    ("P05", "Mobile App Platform", 5, "in_planning", 4, "high", "low", "React Native; Firebase"),
    ("P06", "API Gateway & Microservices", 6, "not_started", 6, "high", "medium", "AWS; Node.js; Kubernetes"),
    ("P07", "AI/ML Operations Platform", 7, "not_started", 8, "medium", "medium", "Python; Spark"),
    ("P08", "Legacy System Decommission", 8, "not_started", 10, "medium", "low", "Salesforce; .NET; SQL Server"),
    ("P09", "SOX/SOC2 Compliance Automation", 9, "not_started", 4, "high", "low", "Compliance; ServiceNow"),
    ("P10", "Employee Experience Portal", 10, "not_started", 8, "medium", "low", "React; ServiceNow; Power Platform"),
    ("P11", "Cloud Cost Optimization", 11, "not_started", 2, "high", "low", "AWS; Azure; Terraform"),
    ("P12", "Salesforce CPQ Implementation", 12, "not_started", 6, "high", "medium", "Salesforce"),
    ("P13", "Disaster Recovery Modernization", 13, "not_started", 10, "critical", "medium", "AWS; Azure; Networking"),
    ("P14", "Warehouse Management System", 14, "not_started", 12, "high", "high", "SAP S/4HANA; EDI"),
    ("P15", "Board Reporting Dashboard", 15, "not_started", 4, "medium", "low", "Tableau; Snowflake"),
    ("P16", "Vendor Portal & EDI Upgrade", 16, "not_started", 14, "medium", "medium", "EDI; .NET"),
    ("P17", "DevOps Pipeline Maturity", 17, "not_started", 2, "medium", "low", "Kubernetes; Terraform; AWS"),
    ("P18", "Customer 360 Data Hub", 18, "not_started", 16, "high", "high", "Snowflake; Salesforce; dbt"),
    ("P19", "IT Service Management Upgrade", 19, "not_started", 8, "medium", "low", "ServiceNow"),
    ("P20", "eCommerce Platform Upgrade", 20, "not_started", 12, "critical", "high", "React; TypeScript; GraphQL"),
]

# project_id, team_id, design, development, testing, deployment, post-deploy
_ESTIMATES = [
    ("P01", "T-WEB", 80, 320, 120, 24, 40),
    ("P01", "T-SEC", 16, 40, 24, 8, 8),
    ("P02", "T-ERP", 160, 640, 280, 120, 160),
    ("P02", "T-INFRA", 40, 160, 60, 60, 40),
    ("P02", "T-SEC", 24, 60, 40, 16, 16),
    ("P02", "T-DATA", 40, 120, 60, 20, 20),
    ("P03", "T-DATA", 100, 360, 120, 40, 60),
    ("P03", "T-INFRA", 24, 80, 24, 24, 16),
    ("P04", "T-SEC", 80, 200, 100, 60, 40),
    ("P04", "T-INFRA", 40, 160, 40, 40, 24),
    ("P05", "T-MOB", 80, 320, 120, 24, 40),
    ("P05", "T-WEB", 20, 80, 40, 8, 16),
    ("P06", "T-WEB", 40, 160, 60, 24, 24),
    ("P06", "T-INFRA", 24, 80, 24, 16, 8),
    ("P07", "T-DATA", 60, 200, 80, 32, 40),
    ("P07", "T-INFRA", 16, 60, 16, 16, 8),
    ("P08", "T-BIZ", 24, 120, 60, 24, 40),
    ("P08", "T-ERP", 40, 160, 80, 40, 60),
    ("P09", "T-SEC", 32, 100, 40, 16, 16),
    ("P09", "T-BIZ", 16, 60, 24, 8, 8),
    ("P10", "T-WEB", 40, 200, 80, 16, 24),
    ("P10", "T-BIZ", 24, 100, 40, 16, 16),
    ("P11", "T-INFRA", 20, 60, 16, 8, 16),
    ("P12", "T-BIZ", 40, 200, 80, 24, 40),
    ("P13", "T-INFRA", 40, 120, 60, 40, 24),
    ("P14", "T-ERP", 80, 320, 160, 60, 80),
    ("P14", "T-MOB", 24, 80, 40, 8, 16),
    ("P15", "T-DATA", 24, 80, 24, 8, 16),
    ("P16", "T-BIZ", 32, 160, 60, 24, 24),
    ("P16", "T-ERP", 16, 60, 24, 8, 8),
    ("P17", "T-INFRA", 16, 80, 24, 16, 8),
    ("P18", "T-DATA", 60, 240, 100, 32, 40),
    ("P18", "T-BIZ", 24, 80, 40, 8, 16),
    ("P19", "T-BIZ", 16, 60, 24, 8, 16),
    ("P20", "T-WEB", 80, 400, 160, 40, 60),
    ("P20", "T-MOB", 24, 120, 40, 16, 16),
    ("P20", "T-DATA", 16, 40, 16, 8, 8),
]

# resource_id, name, team_id, role, skills with proficiency 1-5
_RESOURCES = [
    ("R-01", "Alex Chen", "T-WEB", "developer", "React:5; TypeScript:5; GraphQL:4; Node.js:3; AWS:2"),
    ("R-02", "Sarah Kim", "T-WEB", "developer", "React:5; TypeScript:5; Node.js:5; AWS:4; GraphQL:4"),
    ("R-03", "Maria Rodriguez", "T-ERP", "architect", "SAP S/4HANA:5; SAP BTP:5; ABAP:5; Data Migration:4"),
    ("R-04", "Robert Kim", "T-ERP", "developer", "ABAP:5; SAP S/4HANA:4; SAP Fiori:3; EDI:3"),
    ("R-05", "Carlos Mendez", "T-ERP", "developer", "ABAP:3; SAP S/4HANA:3; Data Migration:3; Oracle:2"),
    ("R-06", "James Wilson", "T-DATA", "developer", "Snowflake:5; dbt:5; Python:5; Spark:4; Airflow:4"),
    ("R-07", "Olivia Brown", "T-DATA", "developer", "Tableau:5; Snowflake:4; Python:3; dbt:3"),
    ("R-08", "Chris Anderson", "T-INFRA", "architect", "AWS:5; Azure:5; Terraform:5; Kubernetes:5; Networking:4"),
    ("R-09", "Jessica Hall", "T-INFRA", "devops", "Kubernetes:5; AWS:4; Terraform:4; CI/CD:5; Linux:4"),
    ("R-10", "Samantha Reed", "T-SEC", "architect", "Zero Trust:5; IAM:5; SIEM:4; Penetration Testing:4"),
    ("R-11", "Tyler Jackson", "T-SEC", "developer", "Penetration Testing:5; SIEM:4; IAM:3; Zero Trust:3"),
    ("R-12", "Jennifer Martinez", "T-BIZ", "developer", "Salesforce:5; Apex:5; Lightning:4; SQL Server:3"),
    ("R-13", "Kevin Patel", "T-BIZ", "developer", "ServiceNow:4; JavaScript:3; ITIL:4"),
]

# resource_id, project_id, role, allocation %, start week, end week
_ASSIGNMENTS = [
    ("R-01", "P01", "developer", 60, 0, 19),
    ("R-01", "P20", "developer", 50, 12, 30),
    ("R-02", "P01", "developer", 40, 0, 19),
    ("R-03", "P02", "architect", 50, 0, 39),
    ("R-03", "P14", "architect", 50, 12, 40),
    ("R-04", "P02", "developer", 80, 0, 39),
    ("R-05", "P14", "developer", 60, 12, 40),
    ("R-06", "P03", "developer", 70, 2, 25),
    ("R-07", "P15", "developer", 50, 4, 12),
    ("R-08", "P11", "architect", 30, 2, 10),
    ("R-09", "P17", "devops", 40, 2, 14),
    ("R-10", "P04", "architect", 80, 0, 30),
    ("R-11", "P04", "developer", 50, 0, 30),
    ("R-12", "P12", "developer", 70, 6, 30),
    ("R-13", "P19", "developer", 40, 8, 20),
]


def generate_teams_df() -> pd.DataFrame:
    """Seven IT delivery teams with per-role FTE, KLO/TLM and admin overhead."""
    rows = []
    for team_id, name, ftes, klo, admin, skills in _TEAMS:
        row = {"Team ID": team_id, "Team Name": name}
        for role, label in ROLE_COLUMN_LABELS.items():
            row[label] = ftes.get(role, 0.0)
        row.update({"KLO/TLM Hours/Week": klo, "Admin %": admin, "Skills": skills})
        rows.append(row)
    return pd.DataFrame(rows)


def generate_projects_df() -> pd.DataFrame:
    rows = [{
        "Project ID": pid,
        "Project Name": name,
        "Priority": priority,
        "Status": status,
        "Start Week": start,
        "Business Value": value,
        "Risk Level": risk,
        "Required Skills": skills,
    } for pid, name, priority, status, start, value, risk, skills in _PROJECTS]
    return pd.DataFrame(rows)


def generate_estimates_df() -> pd.DataFrame:
    rows = [{
        "Project ID": pid,
        "Team ID": tid,
        "Design Hours": design,
        "Development Hours": dev,
        "Testing Hours": test,
        "Deployment Hours": deploy,
        "Post-Deploy Hours": post,
    } for pid, tid, design, dev, test, deploy, post in _ESTIMATES]
    return pd.DataFrame(rows)


def generate_holidays_df() -> pd.DataFrame:
    """US company holidays on 0-based planning weeks, recurring yearly."""
    holidays = [
        ("New Year", 0), ("MLK Day", 2), ("Presidents Day", 7), ("Memorial Day", 21),
        ("Independence Day", 26), ("Labor Day", 35), ("Thanksgiving", 47), ("Christmas", 51),
    ]
    return pd.DataFrame([
        {"Holiday Name": name, "Week": week, "Hours Off": 8, "Team IDs": "", "Recurring": "Yes"}
        for name, week in holidays
    ])


def generate_pto_df() -> pd.DataFrame:
    return pd.DataFrame([
        {"Team ID": "T-WEB", "Person Name": "Alex Chen", "Role": "developer",
         "Start Week": 10, "End Week": 12, "Hours/Week": 40, "Reason": "Vacation"},
        {"Team ID": "T-ERP", "Person Name": "Maria Rodriguez", "Role": "architect",
         "Start Week": 16, "End Week": 17, "Hours/Week": 40, "Reason": "Conference"},
        {"Team ID": "T-DATA", "Person Name": "James Wilson", "Role": "developer",
         "Start Week": 22, "End Week": 24, "Hours/Week": 40, "Reason": "Paternity Leave"},
    ])


def generate_resources_df() -> pd.DataFrame:
    return pd.DataFrame([
        {"Resource ID": rid, "Name": name, "Team ID": tid, "Role": role, "Skills": skills}
        for rid, name, tid, role, skills in _RESOURCES
    ])


def generate_assignments_df() -> pd.DataFrame:
    return pd.DataFrame([{
        "Resource ID": rid,
        "Project ID": pid,
        "Role": role,
        "Allocation %": pct,
        "Start Week": start,
        "End Week": end,
    } for rid, pid, role, pct, start, end in _ASSIGNMENTS])


def generate_sample_frames() -> dict:
    return {
        "teams": generate_teams_df(),
        "projects": generate_projects_df(),
        "estimates": generate_estimates_df(),
        "holidays": generate_holidays_df(),
        "pto": generate_pto_df(),
        "resources": generate_resources_df(),
        "assignments": generate_assignments_df(),
    }


def generate_sample_scenarios() -> List[Scenario]:
    """Two what-if overlays: contractor augmentation and deferring low-priority work."""
    augmentation = Scenario(
        scenario_id="staff-aug-q2",
        name="Staff Augmentation Q2",
        description="Contract capacity for ERP, Security and Data",
        contractors=[
            Contractor("T-ERP", "developer", 2.0, 26, start_week=4, label="SAP Consultants"),
            Contractor("T-ERP", "qa", 1.0, 20, start_week=8, label="Contract QA - ERP"),
            Contractor("T-SEC", "architect", 0.5, 16, start_week=0, label="Zero Trust Architect"),
            Contractor("T-DATA", "developer", 1.0, 20, start_week=4, label="Snowflake Engineer"),
        ],
    )
    deferral = Scenario(
        scenario_id="defer-low-priority",
        name="Defer Low Priority",
        description="Push reporting, vendor portal and Customer 360 to the back",
        priority_overrides={
            pid: PriorityOverride(pid, 25) for pid in ("P15", "P16", "P18")
        },
    )
    return [augmentation, deferral]


def generate_sample_csvs(output_dir: str):
    """Write sample CSV files to the given directory."""
    os.makedirs(output_dir, exist_ok=True)
    for category, df in generate_sample_frames().items():
        df.to_csv(os.path.join(output_dir, f"{category}.csv"), index=False)


def generate_sample_excel(output_dir: str) -> str:
    """Write a single multi-tab Excel file with every sample dataset."""
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, "sample_portfolio.xlsx")
    sheet_names = {
        "teams": "Teams", "projects": "Projects", "estimates": "Estimates",
        "holidays": "Holidays", "pto": "PTO",
        "resources": "Resources", "assignments": "Assignments",
    }
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for category, df in generate_sample_frames().items():
            df.to_excel(writer, sheet_name=sheet_names[category], index=False)
    return path
