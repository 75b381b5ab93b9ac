"""
Equity Payoff Projector: Dashboard
===================================

Projects a cash-out refinance or equity line whose proceeds are invested in a
volatile asset, and shows whether (and when) the asset could retire the loan.

  1. Inputs:     property, loan, carrying costs, investment, payoff trigger
  2. Projection: 240-month stacked value chart, trigger outcome, performance summary
  3. Scenarios:  the same inputs under several growth presets, side by side

Run: streamlit run app/streamlit_app.py
"""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

import altair as alt
import pandas as pd
import streamlit as st

# ---------------------------------------------------------------------------
# Make project root importable
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import SCENARIO_PRESETS, ProjectionConfig
from core.schema import (
    CASH_OUT_REFINANCE,
    PERCENTAGE_OF_DEBT,
    RETAINED_FLOOR,
    REVOLVING_LINE,
    ProjectionInput,
)

from data_prep.price_feed import FALLBACK_UNIT_PRICE, PriceCache, get_current_asset_price

from behaviors.cycle_calendar import cycle_info

from engine.runner import build_performance_model, run_projection, run_scenarios

from pm.decisions import generate_guidance_report

LOAN_LABELS = {
    "Cash-Out Refinance": CASH_OUT_REFINANCE,
    "Equity Line (HELOC)": REVOLVING_LINE,
}
TRIGGER_LABELS = {
    "Asset value as % of debt": PERCENTAGE_OF_DEBT,
    "Retained value above debt ($)": RETAINED_FLOOR,
}


# ---------------------------------------------------------------------------
# Price lookup (cache lives in session state, owned by this page)
# ---------------------------------------------------------------------------
def _price_cache() -> PriceCache:
    if "price_cache" not in st.session_state:
        st.session_state["price_cache"] = PriceCache(ttl_seconds=60)
    return st.session_state["price_cache"]


# ---------------------------------------------------------------------------
# Chart helpers
# ---------------------------------------------------------------------------
def _fmt_money(val):
    return f"${val:,.0f}"


def _fmt_pct(val):
    return f"{val:.2%}"


def _plot_stacked_values(chart_df: pd.DataFrame, *, trigger_date=None, height=380):
    """Stacked area: base equity + appreciation + asset value, with debt as a line."""
    if chart_df.empty:
        st.info("No data to plot.")
        return
    d = chart_df.copy()
    d["date"] = pd.to_datetime(d["date"], errors="coerce")
    stacked = d.melt(
        id_vars=["date"],
        value_vars=["base_equity", "appreciation", "asset_value"],
        var_name="component",
        value_name="value",
    )
    area = (
        alt.Chart(stacked).mark_area(opacity=0.75)
        .encode(
            x=alt.X("date:T", title="Date"),
            y=alt.Y("value:Q", stack="zero", title="Value ($)", axis=alt.Axis(format="$,.0f")),
            color=alt.Color(
                "component:N",
                title="Component",
                sort=["base_equity", "appreciation", "asset_value"],
            ),
            tooltip=["date:T", "component:N", alt.Tooltip("value:Q", format="$,.0f")],
        )
    )
    debt = (
        alt.Chart(d).mark_line(color="#d62728", strokeDash=[4, 3])
        .encode(x="date:T", y=alt.Y("debt:Q"), tooltip=["date:T", alt.Tooltip("debt:Q", format="$,.0f")])
    )
    layers = [area, debt]
    if trigger_date is not None:
        rule_df = pd.DataFrame({"date": [pd.Timestamp(trigger_date)]})
        layers.append(alt.Chart(rule_df).mark_rule(color="green", size=2).encode(x="date:T"))
    chart = alt.layer(*layers).properties(title="Projected Value (240 months)", height=height)
    st.altair_chart(chart, use_container_width=True)


def _plot_line(df, *, x, y, title, y_title, height=260):
    if not isinstance(df, pd.DataFrame) or len(df) == 0 or x not in df.columns or y not in df.columns:
        st.info("No data to plot.")
        return
    d = df[[x, y]].copy()
    d[x] = pd.to_datetime(d[x], errors="coerce")
    chart = (
        alt.Chart(d).mark_line()
        .encode(
            x=alt.X(f"{x}:T", title="Date"),
            y=alt.Y(f"{y}:Q", title=y_title, axis=alt.Axis(format=",.2f")),
        )
        .properties(title=title, height=height)
    )
    st.altair_chart(chart, use_container_width=True)


def _plot_scenario_totals(results: dict, height=320):
    rows = []
    for name, res in results.items():
        frame = res.chart_frame()[["date", "total_value"]].copy()
        frame["scenario"] = name
        rows.append(frame)
    if not rows:
        return
    d = pd.concat(rows, ignore_index=True)
    d["date"] = pd.to_datetime(d["date"], errors="coerce")
    chart = (
        alt.Chart(d).mark_line()
        .encode(
            x=alt.X("date:T", title="Date"),
            y=alt.Y("total_value:Q", title="Total Value ($)", axis=alt.Axis(format="$,.0f")),
            color=alt.Color("scenario:N", title="Scenario"),
        )
        .properties(title="Total Value by Scenario", height=height)
    )
    st.altair_chart(chart, use_container_width=True)


def _display_result(result, inputs_raw, monthly_gross_income, mortgage_balance):
    outcome = result.trigger_outcome
    perf = result.performance_summary

    # --- 1. KPI row ---
    k1, k2, k3, k4, k5 = st.columns(5)
    if outcome.fired:
        k1.metric("Payoff Month", f"{outcome.trigger_month}", f"{outcome.years_to_payoff:.1f} yr")
    else:
        k1.metric("Payoff Month", "Not reached")
    k2.metric("Final Total Value", _fmt_money(perf.final_total_value))
    k3.metric("Final Asset Value", _fmt_money(perf.final_asset_value))
    k4.metric("Total ROI", f"{perf.total_roi:.1%}")
    k5.metric("Annualized Return", _fmt_pct(perf.annualized_return))

    # --- 2. Stacked chart ---
    _plot_stacked_values(result.chart_frame(), trigger_date=outcome.trigger_date)

    # --- 3. Trigger outcome + performance summary ---
    left, right = st.columns(2)
    with left:
        st.markdown("**Payoff Trigger**")
        if outcome.fired:
            st.success(
                f"Trigger met in month {outcome.trigger_month} ({outcome.trigger_date:%Y-%m}). "
                f"Asset {_fmt_money(outcome.asset_value_at_trigger)} vs debt {_fmt_money(outcome.debt_at_trigger)}."
            )
            st.markdown(
                f"- Units at trigger: **{outcome.units_at_trigger:.4f}**\n"
                f"- Units retained after payoff: **{outcome.units_retained:.4f}**\n"
                f"- Estimated interest saved: **{_fmt_money(outcome.estimated_interest_saved)}** "
                f"({outcome.months_remaining_in_term} months left in term)"
            )
        else:
            st.warning("The payoff trigger is never met within the projection horizon.")
    with right:
        st.markdown("**Performance Summary**")
        st.dataframe(perf.to_dataframe(), use_container_width=True, hide_index=True)

    # --- 4. Financing guidance ---
    guidance = generate_guidance_report(
        ProjectionInput.model_validate(inputs_raw),
        result,
        monthly_gross_income=monthly_gross_income or None,
        mortgage_balance=mortgage_balance or 0.0,
    )
    st.markdown("**Financing Guidance**")
    g1, g2 = st.columns([2, 1])
    with g1:
        st.dataframe(guidance.to_dataframe(), use_container_width=True, hide_index=True)
    with g2:
        for rec in guidance.recommendations:
            st.info(rec)
        for flag in guidance.flags:
            st.warning(flag)

    # --- 5. Asset path ---
    sched = result.schedule_frame()
    left, right = st.columns(2)
    with left:
        _plot_line(sched, x="date", y="spot_price", title="Projected Spot Price", y_title="Price ($)")
    with right:
        _plot_line(sched, x="date", y="units_held", title="Units Held", y_title="Units")

    # --- 6. Tables ---
    with st.expander("Monthly schedule", expanded=False):
        st.dataframe(sched, use_container_width=True, hide_index=True)
    with st.expander("Growth timeline", expanded=False):
        st.dataframe(result.timeline_frame(), use_container_width=True, hide_index=True)


# ═══════════════════════════════════════════════════════════════════════════
# PAGE CONFIG
# ═══════════════════════════════════════════════════════════════════════════
st.set_page_config(page_title="Equity Payoff Projector", layout="wide")
st.title("Equity Payoff Projector")
st.caption("Mortgage amortization vs. cyclical asset growth: when could the asset retire the loan?")

config = ProjectionConfig()

# ═══════════════════════════════════════════════════════════════════════════
# SIDEBAR: Market Data
# ═══════════════════════════════════════════════════════════════════════════
with st.sidebar:
    st.header("Market Data")
    use_live = st.checkbox("Use live spot price", value=False)
    if use_live:
        quote = get_current_asset_price(cache=_price_cache())
        if quote.source == "fallback":
            st.warning(f"Live price unavailable, using fallback {_fmt_money(quote.price)}")
        else:
            st.caption(f"Spot price from {quote.source}: {_fmt_money(quote.price)}")
        default_price = quote.price
    else:
        default_price = FALLBACK_UNIT_PRICE

    today = date.today()
    info = cycle_info(today)
    st.markdown("**Cycle Position Today**")
    st.markdown(
        f"- Phase: **{info.phase.value}** (month {info.month_in_phase} of {info.phase_length})\n"
        f"- Cycle month: **{info.cycle_position}** / 48\n"
        f"- Next event: **{info.next_event:%Y-%m-%d}** ({info.months_to_next_event} months)"
    )

# ═══════════════════════════════════════════════════════════════════════════
# INPUTS
# ═══════════════════════════════════════════════════════════════════════════
with st.form("projection_inputs"):
    st.subheader("Property & Loan")
    c1, c2, c3 = st.columns(3)
    with c1:
        property_value = st.number_input("Property Value ($)", min_value=0.0, value=500000.0, step=10000.0)
        appreciation = st.number_input("Appreciation (annual %)", value=3.0, step=0.5) / 100.0
        mortgage_balance = st.number_input("Existing Mortgage Balance ($)", min_value=0.0, value=250000.0, step=10000.0)
    with c2:
        loan_label = st.selectbox("Loan Type", list(LOAN_LABELS.keys()))
        loan_amount = st.number_input("Loan Amount ($)", min_value=0.0, value=150000.0, step=5000.0)
        loan_rate = st.number_input("Interest Rate (annual %)", min_value=0.0, value=7.0, step=0.125) / 100.0
        loan_years = st.number_input("Term (years)", min_value=1, max_value=50, value=30, step=1)
    with c3:
        monthly_income = st.number_input("Monthly Rental Income ($)", min_value=0.0, value=2500.0, step=100.0)
        taxes = st.number_input("Monthly Taxes ($)", min_value=0.0, value=400.0, step=25.0)
        insurance = st.number_input("Monthly Insurance ($)", min_value=0.0, value=150.0, step=25.0)
        hoa = st.number_input("Monthly HOA ($)", min_value=0.0, value=0.0, step=25.0)

    st.subheader("Asset Investment & Trigger")
    c1, c2, c3 = st.columns(3)
    with c1:
        investment = st.number_input("Investment Amount ($)", min_value=0.0, value=loan_amount, step=5000.0)
        unit_price = st.number_input("Unit Price ($)", min_value=0.0, value=float(default_price), step=500.0)
        start = st.date_input("Start Date", value=today)
    with c2:
        initial_rate = st.slider("Cycle 1 Growth (annual %)", 1.0, 100.0, 25.0, 1.0) / 100.0
        use_decay = st.checkbox("Decay growth across cycles", value=True)
        final_rate = st.slider("Final Cycle Growth (annual %)", 1.0, 100.0, 10.0, 1.0) / 100.0
        shaping = st.checkbox("Cyclical shaping", value=True)
        drawdown = st.slider("Max Drawdown (%)", 10.0, 90.0, 70.0, 1.0)
    with c3:
        trigger_label = st.selectbox("Payoff Trigger", list(TRIGGER_LABELS.keys()))
        threshold = st.number_input("Threshold", min_value=0.0, value=200.0, step=10.0)
        gross_income = st.number_input("Borrower Gross Income ($/mo, optional)", min_value=0.0, value=0.0, step=500.0)

    submitted = st.form_submit_button("Run Projection", type="primary", use_container_width=True)

loan_kind = LOAN_LABELS[loan_label]
if loan_kind == CASH_OUT_REFINANCE:
    loan_raw = {"kind": loan_kind, "newLoanAmount": loan_amount, "newRate": loan_rate, "newTermYears": loan_years}
else:
    loan_raw = {"kind": loan_kind, "balance": loan_amount, "rate": loan_rate, "termYears": loan_years}

inputs_raw = {
    "property": {"currentValue": property_value, "appreciationRate": appreciation},
    "loan": loan_raw,
    "propertyIncome": {
        "monthlyIncome": monthly_income,
        "monthlyTaxes": taxes,
        "monthlyInsurance": insurance,
        "monthlyHOA": hoa,
    },
    "assetInvestment": {
        "investmentAmount": investment,
        "currentUnitPrice": unit_price,
        "performanceSettings": {
            "initialAnnualRate": initial_rate,
            "finalAnnualRate": final_rate if use_decay else None,
            "useCyclicalShaping": shaping,
            "maxDrawdownPercent": drawdown,
            "startDate": start.isoformat(),
        },
    },
    "payoffTrigger": {"kind": TRIGGER_LABELS[trigger_label], "threshold": threshold},
}

# ═══════════════════════════════════════════════════════════════════════════
# PROJECTION
# ═══════════════════════════════════════════════════════════════════════════
if submitted:
    st.session_state["last_inputs"] = inputs_raw
    st.session_state["last_gross_income"] = gross_income
    st.session_state["last_mortgage_balance"] = mortgage_balance

last_inputs = st.session_state.get("last_inputs")
if last_inputs is None:
    st.info("Set the inputs and press **Run Projection**.")
    st.stop()

with st.spinner("Running projection..."):
    run = run_projection(last_inputs, config)

for w in run.validation.warnings:
    st.warning(w)
if not run.ok:
    st.error("Input validation failed:\n" + run.validation.summary())
    st.stop()

st.divider()
st.subheader("Projection")
_display_result(
    run.result,
    last_inputs,
    st.session_state.get("last_gross_income"),
    st.session_state.get("last_mortgage_balance"),
)

with st.expander("Growth model diagnostics", expanded=False):
    typed = ProjectionInput.model_validate(last_inputs)
    model = build_performance_model(typed, config)
    st.json(model.describe(typed.asset_investment.performance_settings.start_date, run.result.horizon_months))

# ═══════════════════════════════════════════════════════════════════════════
# SCENARIO COMPARISON
# ═══════════════════════════════════════════════════════════════════════════
st.divider()
st.subheader("Growth Scenario Comparison")

preset_tbl = pd.DataFrame([
    {
        "Select": True,
        "Scenario": n,
        "Cycle 1": f"{float(v['initial_annual_rate']) * 100:.0f}%",
        "Final Cycle": f"{float(v['final_annual_rate']) * 100:.0f}%" if v.get("final_annual_rate") is not None else "flat",
        "Drawdown": f"{float(v['max_drawdown_percent']):.0f}%",
        "Description": v["description"],
    }
    for n, v in SCENARIO_PRESETS.items()
])
edited_tbl = st.data_editor(
    preset_tbl,
    hide_index=True,
    use_container_width=True,
    key="scenario_editor",
    column_config={"Select": st.column_config.CheckboxColumn("Select", default=True)},
    disabled=["Scenario", "Cycle 1", "Final Cycle", "Drawdown", "Description"],
)
selected_names = edited_tbl.loc[edited_tbl["Select"], "Scenario"].tolist()

run_selected = st.button(
    "Run Selected Scenarios", type="primary", use_container_width=True,
    disabled=len(selected_names) == 0,
)

if run_selected:
    typed = ProjectionInput.model_validate(last_inputs)
    presets = {n: SCENARIO_PRESETS[n] for n in selected_names}
    with st.spinner(f"Running {len(presets)} scenarios..."):
        comparison = run_scenarios(typed, presets, config)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Best Scenario", comparison["best_scenario"])
    c2.metric("Worst Scenario", comparison["worst_scenario"])
    avg = comparison["average_payoff_months"]
    c3.metric("Avg Payoff", f"{avg / 12:.1f} yr" if avg is not None else "n/a")
    c4.metric("Scenarios Paying Off", f"{comparison['payoff_success_rate']:.0%}")

    table = comparison["summary_table"].copy()
    for col in ["Final Total Value", "Final Asset Value"]:
        table[col] = table[col].apply(_fmt_money)
    for col in ["Total ROI", "Annualized Return"]:
        table[col] = table[col].apply(_fmt_pct)
    st.dataframe(table, use_container_width=True, hide_index=True)
    _plot_scenario_totals(comparison["results"])
