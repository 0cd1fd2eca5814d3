"""
FIRE Monte Carlo Simulation - Streamlit Web Application
Retirement plan with income, living costs, savings plan, taxes and export
"""
import streamlit as st
import pandas as pd
import json
import sys
from pathlib import Path
from dataclasses import asdict
from datetime import datetime

# Add repo root to path
sys.path.insert(0, str(Path(__file__).parent))

from firesim.config import FireConfig, SimulationConfig
from firesim.errors import FireSimError
from firesim.simulation.monte_carlo import FireSimulator
from firesim.risk.metrics import summarize_trials, assess_success_rate
from firesim.visualization.charts import (
    plot_trial_history,
    plot_final_assets_distribution,
    plot_failure_months_histogram,
    plot_success_rate_gauge
)
from firesim.export.reports import (
    create_excel_report,
    create_csv_report,
    history_to_dataframe,
    results_to_dataframe,
    select_trials,
    format_currency
)

# Page configuration - responsive layout
st.set_page_config(
    page_title="FIRE Monte Carlo Simulation",
    page_icon="🔥",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.title("🔥 FIRE Monte Carlo Simulation")

# Initialize session state
for key in ['results', 'loaded_config', 'run_config']:
    if key not in st.session_state:
        st.session_state[key] = None


DEFAULT_CONFIG = {
    "config": {"years": 30, "times": 100, "cash": 3000000, "inflation_rate": 2.0},
    "stocks": [
        {"name": "All Country", "units": 20000000, "value_per_unit": 22000, "unit_size": 10000,
         "average_price": 15000, "expected_return": 5.0, "volatility": 15.0,
         "tax_start_year": None, "tax_start_month": 0},
        {"name": "NISA S&P500", "units": 8000000, "value_per_unit": 30000, "unit_size": 10000,
         "average_price": 25000, "expected_return": 6.0, "volatility": 18.0,
         "tax_start_year": 99, "tax_start_month": 0},
    ],
    "correlations": [{"asset_a": "All Country", "asset_b": "NISA S&P500", "coefficient": 0.9}],
    "recurring": [{"asset": "NISA S&P500", "amount": 100000, "pattern": "monthly",
                   "start_month": 0, "end_month": 59}],
    "life_cost": [{"month": 0, "amount": 250000}],
    "big_expense": [{"month": 120, "amount": 2000000}],
    "income": [{"amount": 80000, "start_month": 0, "end_month": 59}],
    "tax": [{"month": 0, "rate": 20.315}],
}

# Columns per configuration section, in editor order
SECTION_COLUMNS = {
    "stocks": ["name", "units", "value_per_unit", "unit_size", "average_price",
               "expected_return", "volatility", "tax_start_year", "tax_start_month"],
    "correlations": ["asset_a", "asset_b", "coefficient"],
    "recurring": ["asset", "amount", "pattern", "start_month", "end_month"],
    "life_cost": ["month", "amount"],
    "big_expense": ["month", "amount"],
    "income": ["amount", "start_month", "end_month"],
    "tax": ["month", "rate"],
}

INTEGER_FIELDS = {"units", "tax_start_year", "tax_start_month", "month", "start_month", "end_month"}

SECTION_LABELS = {
    "stocks": "📈 Wertpapiere",
    "correlations": "🔗 Korrelationen",
    "recurring": "💰 Sparplan",
    "life_cost": "🏠 Lebenshaltungskosten",
    "big_expense": "💸 Große Ausgaben",
    "income": "💼 Einkommen",
    "tax": "🧾 Steuersatz",
}


def editor_records(df: pd.DataFrame) -> list[dict]:
    """Turn an edited table back into config entries (NaN -> None, ints restored)."""
    records = []
    for row in df.to_dict(orient="records"):
        if all(pd.isna(v) for v in row.values()):
            continue
        entry = {}
        for key, value in row.items():
            if pd.isna(value):
                entry[key] = None
            elif key in INTEGER_FIELDS:
                entry[key] = int(value)
            else:
                entry[key] = value
        records.append(entry)
    return records


def drop_unset(entries: list[dict], optional: set[str]) -> list[dict]:
    """Remove None values for fields that have defaults."""
    return [{k: v for k, v in e.items() if not (k in optional and v is None)} for e in entries]


# Sidebar - Configuration
with st.sidebar:
    st.header("⚙️ Konfiguration")

    # Config Load Section
    with st.expander("💾 Konfiguration laden", expanded=False):
        uploaded_file = st.file_uploader(
            "Konfiguration laden",
            type=["json"],
            help="Laden Sie eine gespeicherte FIRE-Konfiguration"
        )

        if uploaded_file is not None:
            try:
                config_data = json.load(uploaded_file)
                FireConfig.from_dict(config_data)
                st.session_state.loaded_config = config_data
                st.success(f"'{uploaded_file.name}' geladen!")
            except (ValueError, FireSimError) as e:
                st.error(f"Fehler: {e}")
                st.session_state.loaded_config = None

    loaded = st.session_state.loaded_config or DEFAULT_CONFIG
    sim_defaults = {**asdict(SimulationConfig()), **loaded.get("config", {})}

    # Simulation Settings
    st.subheader("Simulation")

    years = st.slider("Zeithorizont (Jahre)", min_value=1, max_value=60,
                      value=int(sim_defaults["years"]))

    times_options = [10, 50, 100, 500, 1000, 5000]
    default_times = int(sim_defaults["times"])
    times = st.select_slider(
        "Anzahl Durchläufe",
        options=times_options,
        value=default_times if default_times in times_options else 100
    )

    cash = st.number_input("Anfangsbestand Bargeld (¥)", min_value=0,
                           value=int(sim_defaults["cash"]), step=100000)

    inflation_rate = st.number_input("Inflation p.a. (%)", min_value=-10.0, max_value=20.0,
                                     value=float(sim_defaults["inflation_rate"]), step=0.1)

    use_seed = st.checkbox("Reproduzierbar (Seed)", value=False)
    random_seed = st.number_input("Seed", min_value=0, value=42, step=1,
                                  disabled=not use_seed)

    # Run button
    st.markdown("---")
    run_simulation = st.button("🚀 Simulation starten", type="primary", use_container_width=True)

# Main content - event tables
st.header("Plan")
edited = {}
tabs = st.tabs(list(SECTION_LABELS.values()))
for tab, section in zip(tabs, SECTION_LABELS):
    with tab:
        frame = pd.DataFrame(loaded.get(section, []), columns=SECTION_COLUMNS[section])
        column_config = {}
        if section == "recurring":
            column_config["pattern"] = st.column_config.SelectboxColumn(
                "pattern", options=["once", "monthly", "annual"], required=True
            )
        edited[section] = st.data_editor(
            frame,
            num_rows="dynamic",
            use_container_width=True,
            column_config=column_config,
            key=f"editor_{section}"
        )

plan = {section: editor_records(df) for section, df in edited.items()}
plan["stocks"] = drop_unset(plan["stocks"], {"unit_size", "average_price", "expected_return",
                                              "volatility", "tax_start_month"})
plan["recurring"] = drop_unset(plan["recurring"], {"pattern", "start_month"})
plan["income"] = drop_unset(plan["income"], {"start_month"})
plan["config"] = {
    "years": years,
    "times": times,
    "cash": float(cash),
    "inflation_rate": inflation_rate,
    "random_seed": int(random_seed) if use_seed else None,
}

with st.sidebar:
    # Save Config Section
    with st.expander("💾 Konfiguration speichern", expanded=False):
        config_name = st.text_input("Name", value="", placeholder="Mein FIRE-Plan")
        config_json = json.dumps(plan, indent=2, ensure_ascii=False, default=float)
        filename = f"{config_name or 'fire_plan'}_{datetime.now().strftime('%Y%m%d')}.json"

        st.download_button(
            label="📥 Konfiguration herunterladen",
            data=config_json,
            file_name=filename,
            mime="application/json",
            use_container_width=True
        )

if run_simulation:
    try:
        fire_config = FireConfig.from_dict(plan)
    except FireSimError as e:
        st.error(f"Ungültige Konfiguration: {e}")
        st.stop()

    if not fire_config.assets:
        st.error("Bitte mindestens ein Wertpapier eintragen.")
        st.stop()

    progress = st.progress(0, text=f"Führe {fire_config.simulation.times:,} Durchläufe durch...")

    def report_progress(done: int, total: int):
        progress.progress(int(done / total * 100), text=f"Durchlauf {done:,} / {total:,}")

    try:
        results = FireSimulator(fire_config).run(progress=report_progress)
    except FireSimError as e:
        st.error(f"Simulation fehlgeschlagen: {e}")
        st.stop()

    st.session_state.results = results
    st.session_state.run_config = fire_config
    progress.progress(100, text="Fertig!")
    st.success("Simulation abgeschlossen!")

# Display results with tabs
if st.session_state.results:
    results = st.session_state.results
    fire_config = st.session_state.run_config
    summary = summarize_trials(results)
    assessment = assess_success_rate(summary.success_rate * 100, summary.worst_10th_final_assets)

    tab1, tab2, tab3 = st.tabs([
        "📊 Übersicht",
        "🔍 Einzelner Durchlauf",
        "📥 Export"
    ])

    # TAB 1: Overview
    with tab1:
        st.header("Ergebnis")

        col1, col2 = st.columns([1, 2])
        with col1:
            st.plotly_chart(plot_success_rate_gauge(summary.success_rate), use_container_width=True)
        with col2:
            st.subheader(f"{'★' * assessment.stars}{'☆' * (10 - assessment.stars)}")
            st.markdown(f"**{assessment.label}**")
            if assessment.low_tail_warning:
                st.warning("Im ungünstigen 10%-Fall bleibt am Ende kein Vermögen übrig.")

        cols = st.columns(4)
        with cols[0]:
            st.metric("Erfolgsquote", f"{summary.success_rate:.1%}",
                      f"{summary.success_count} / {summary.num_trials}")
        with cols[1]:
            st.metric("Median Endvermögen", format_currency(summary.median_final_assets))
        with cols[2]:
            st.metric("10. Perzentil Endvermögen", format_currency(summary.worst_10th_final_assets))
        with cols[3]:
            if summary.failure_count:
                st.metric("Median Monate bis Scheitern", f"{summary.median_failure_month:.0f}")
            else:
                st.metric("Median Monate bis Scheitern", "–")

        st.markdown("---")
        col1, col2 = st.columns(2)
        with col1:
            st.plotly_chart(plot_final_assets_distribution(results), use_container_width=True)
        with col2:
            st.plotly_chart(plot_failure_months_histogram(results), use_container_width=True)

        st.subheader("Alle Durchläufe")
        st.dataframe(results_to_dataframe(results), use_container_width=True)

    # TAB 2: Single trial
    with tab2:
        st.header("🔍 Einzelner Durchlauf")
        failed_only = st.checkbox("Nur gescheiterte Durchläufe", value=False)
        candidates = select_trials(results, failed_only)
        if not candidates:
            st.info("Keine gescheiterten Durchläufe.")
        else:
            trial_id = st.selectbox("Durchlauf", options=[r.trial_id for r in candidates], index=0)
            result = next(r for r in candidates if r.trial_id == trial_id)

            if result.success:
                st.success(f"Durchlauf #{trial_id} erfolgreich")
            else:
                st.error(f"Durchlauf #{trial_id} gescheitert nach {result.failure_month + 1} Monaten")

            st.plotly_chart(plot_trial_history(result), use_container_width=True)
            st.dataframe(history_to_dataframe(result, fire_config.asset_names),
                         use_container_width=True)

    # TAB 3: Export
    with tab3:
        st.header("📥 Export")
        col1, col2 = st.columns(2)
        timestamp = datetime.now().strftime('%Y%m%d_%H%M')

        with col1:
            st.download_button(
                label="📊 Excel-Bericht",
                data=create_excel_report(fire_config, results),
                file_name=f"fire_simulation_{timestamp}.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                use_container_width=True
            )
        with col2:
            st.download_button(
                label="📄 CSV-Bericht",
                data=create_csv_report(results),
                file_name=f"fire_simulation_{timestamp}.csv",
                mime="text/csv",
                use_container_width=True
            )

elif st.session_state.results is None:
    st.info("👈 Plan in den Tabellen eintragen und in der Seitenleiste 'Simulation starten' klicken.")

# Footer
st.markdown("---")
st.caption("FIRE Monte Carlo Simulation | Keine Anlageberatung | Made with Streamlit")
