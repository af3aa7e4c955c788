import logging

import altair as alt
import pandas as pd
import streamlit as st

from seo_forecaster import (
    CATEGORY_OPTIONS,
    CTR_MODEL_OPTIONS,
    CURRENCY_OPTIONS,
    CUSTOM_MODEL,
    DEFAULT_KEYWORDS,
    DEFAULT_SETTINGS,
    SWEEP_VARIABLES,
    Keyword,
    KeywordImportError,
    MalformedKeywordError,
    ValidationError,
    break_even_month,
    default_sweep_range,
    forecast,
    resolve_ctr_model,
    sweep,
)
from seo_forecaster.keyword_io import (
    SAMPLE_CSV,
    breakdown_to_frame,
    keyword_entry_error,
    keywords_to_frame,
    load_keywords,
    projections_to_csv,
    projections_to_frame,
    render_print_html,
    sweep_to_frame,
)
from seo_forecaster.settings_store import clear_settings, load_settings, save_settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# ===============================
# App Configuration
# ===============================
st.set_page_config(page_title="SEO Forecasting Tool", page_icon="📈", layout="wide")

# ===============================
# Constants & Defaults
# ===============================
ENTRY_DEFAULTS = {"position": 20, "target": 10, "difficulty": 50}
GENERIC_FORECAST_ERROR = "An error occurred while calculating the forecast. Check the logs for details."
KEYWORD_WIDGET_PREFIXES = ("kw_text_", "kw_vol_", "kw_pos_", "kw_target_", "kw_diff_")


# ===============================
# Helpers
# ===============================
@st.cache_data(show_spinner=False)
def parse_keyword_file(file_bytes: bytes, filename: str) -> list:
    return load_keywords(file_bytes, filename)


def clamp(value, lo, hi):
    return max(lo, min(hi, value))


def current_ctr_model():
    return resolve_ctr_model(st.session_state.settings.ctr_model, st.session_state.custom_ctr)


def clear_keyword_widgets():
    """Drop the per-row edit widget state; rows are keyed by list position."""
    for key in list(st.session_state.keys()):
        if isinstance(key, str) and key.startswith(KEYWORD_WIDGET_PREFIXES):
            del st.session_state[key]


def reset_to_defaults():
    st.session_state.settings = DEFAULT_SETTINGS
    st.session_state.keywords = list(DEFAULT_KEYWORDS)
    st.session_state.custom_ctr = {}
    st.session_state.projections = []
    st.session_state.sweep_points = []
    clear_settings()
    clear_keyword_widgets()


# ===============================
# Session state defaults
# ===============================
if 'settings' not in st.session_state:
    st.session_state.settings = load_settings()
if 'keywords' not in st.session_state:
    st.session_state.keywords = list(DEFAULT_KEYWORDS)
if 'custom_ctr' not in st.session_state:
    st.session_state.custom_ctr = {}
if 'projections' not in st.session_state:
    st.session_state.projections = []
if 'sweep_points' not in st.session_state:
    st.session_state.sweep_points = []
if 'last_upload' not in st.session_state:
    st.session_state.last_upload = None

settings = st.session_state.settings
symbol = settings.currency_symbol

# ===============================
# Main UI (Tabs)
# ===============================
st.title("📈 SEO Forecasting Tool")
st.caption("Upload keywords (CSV or Excel) or enter them manually to forecast traffic, conversions and revenue "
           "from ranking improvements. CTR is credited at the **next whole rank** (7.4 counts as 8); "
           "positions beyond 10 earn a flat 1% CTR.")

tab_forecast, tab_keywords, tab_settings, tab_whatif = st.tabs(
    ["📈 Forecast", "🔑 Keywords", "⚙️ Settings", "🧪 What-If"]
)

# ----------------------------------
# ⚙️ Settings
# ----------------------------------
with tab_settings:
    st.header("Settings")
    with st.form("settings_form"):
        c1, c2, c3 = st.columns(3)
        category = c1.selectbox(
            "Category", CATEGORY_OPTIONS,
            index=CATEGORY_OPTIONS.index(settings.category) if settings.category in CATEGORY_OPTIONS else 0,
            help="Select the category that best matches your business to apply seasonal trends."
        )
        projection_period = c2.number_input(
            "Projection Period (Months)", value=int(settings.projection_period), step=1,
            help="Number of months to forecast (1-12)."
        )
        currency = c3.selectbox(
            "Currency", CURRENCY_OPTIONS,
            index=CURRENCY_OPTIONS.index(settings.currency) if settings.currency in CURRENCY_OPTIONS else 0,
            help="Display label only; no conversion is applied."
        )
        c4, c5, c6 = st.columns(3)
        conversion_rate = c4.number_input(
            "Conversion Rate (%)", min_value=0.0, max_value=100.0,
            value=float(clamp(settings.conversion_rate, 0.0, 100.0)), step=0.1,
            help="The percentage of visitors who make a purchase (e.g., 3% means 3 out of 100 visitors convert)."
        )
        average_order_value = c5.number_input(
            "Average Order Value", min_value=0.0, value=float(max(settings.average_order_value, 0.0)), step=10.0,
            help="The average amount spent per purchase in your selected currency."
        )
        investment = c6.number_input(
            "SEO Investment", min_value=0.0, value=float(max(settings.investment, 0.0)), step=100.0,
            help="Total budget to recover; drives ROI and break-even."
        )
        ctr_model = st.selectbox(
            "CTR Model", CTR_MODEL_OPTIONS,
            index=CTR_MODEL_OPTIONS.index(settings.ctr_model) if settings.ctr_model in CTR_MODEL_OPTIONS else 0,
            help="Click-through-rate curve by position. Choose Custom to enter your own rates below."
        )
        if st.form_submit_button("Save Settings"):
            st.session_state.settings = settings.with_changes(
                category=category,
                projection_period=int(projection_period),
                currency=currency,
                conversion_rate=conversion_rate,
                investment=investment,
                average_order_value=average_order_value,
                ctr_model=ctr_model,
            )
            save_settings(st.session_state.settings)
            st.rerun()

    if settings.ctr_model == CUSTOM_MODEL:
        st.subheader("Custom CTR Table")
        st.caption("CTR (%) per position. Unset or zero positions fall back to 1%.")
        cols = st.columns(5)
        custom = {}
        for pos in range(1, 11):
            pct = cols[(pos - 1) % 5].number_input(
                f"Position {pos} (%)", min_value=0.0, max_value=100.0, step=0.1,
                value=float(st.session_state.custom_ctr.get(pos, 0.0) * 100), key=f"custom_ctr_{pos}"
            )
            custom[pos] = pct / 100.0
        st.session_state.custom_ctr = custom

    st.markdown("---")
    if st.button("Reset to Defaults", help="Restore default settings and keywords, and clear results."):
        reset_to_defaults()
        st.rerun()

# ----------------------------------
# 🔑 Keywords
# ----------------------------------
with tab_keywords:
    st.header("Keywords")

    with st.expander("Upload Keywords", expanded=not st.session_state.keywords):
        st.caption("CSV (.csv) or Excel (.xlsx) with columns: **keyword** and **searchVolume** (required, positive), "
                   "**position**, **targetPosition**, **difficulty** (optional, 1-100).")
        uploaded = st.file_uploader("Select File", type=["csv", "xlsx"], key="keyword_upload")
        if uploaded is not None:
            upload_key = (uploaded.name, uploaded.size)
            if st.session_state.last_upload != upload_key:
                try:
                    st.session_state.keywords = parse_keyword_file(uploaded.getvalue(), uploaded.name)
                    st.session_state.last_upload = upload_key
                    clear_keyword_widgets()
                    st.success("Keywords imported successfully!")
                except KeywordImportError as e:
                    st.error(str(e))
        st.download_button(
            "⬇️ Download Sample CSV",
            data=SAMPLE_CSV.encode('utf-8'),
            file_name="sample_keywords.csv",
            mime="text/csv"
        )

    st.subheader("Add Keyword")
    with st.form("new_keyword_form", clear_on_submit=True):
        c1, c2, c3, c4, c5 = st.columns(5)
        new_text = c1.text_input("Keyword", placeholder="e.g., gas bbq")
        new_volume = c2.number_input("Search Volume", min_value=0, step=100)
        new_position = c3.number_input("Position", value=ENTRY_DEFAULTS["position"], step=1)
        new_target = c4.number_input("Target Position", value=ENTRY_DEFAULTS["target"], step=1)
        new_difficulty = c5.number_input("Difficulty", value=ENTRY_DEFAULTS["difficulty"], step=1)
        if st.form_submit_button("Add Keyword"):
            error = keyword_entry_error(new_text, new_volume, new_position, new_target, new_difficulty)
            if error:
                st.error(error)
            else:
                st.session_state.keywords.append(
                    Keyword(new_text.strip(), int(new_volume), new_position, new_target, int(new_difficulty))
                )
                st.rerun()

    st.markdown("---")
    if not st.session_state.keywords:
        st.info("No keywords yet. Upload a file or add one above.")
    else:
        st.dataframe(keywords_to_frame(st.session_state.keywords), use_container_width=True)
        for idx, kw in enumerate(st.session_state.keywords):
            with st.expander(f"**{kw.text}** (volume {kw.search_volume:,} | {kw.position} → {kw.target_position})"):
                col1, col2 = st.columns([3, 1])
                with col1:
                    with st.form(key=f"edit_keyword_{idx}"):
                        e1, e2, e3, e4, e5 = st.columns(5)
                        edited_text = e1.text_input("Keyword", value=kw.text, key=f"kw_text_{idx}")
                        edited_volume = e2.number_input("Search Volume", value=int(kw.search_volume), step=100,
                                                        key=f"kw_vol_{idx}")
                        edited_position = e3.number_input("Position", value=kw.position, key=f"kw_pos_{idx}")
                        edited_target = e4.number_input("Target Position", value=kw.target_position,
                                                        key=f"kw_target_{idx}")
                        edited_difficulty = e5.number_input("Difficulty", value=int(kw.difficulty), step=1,
                                                            key=f"kw_diff_{idx}")
                        if st.form_submit_button("Update Keyword"):
                            error = keyword_entry_error(edited_text, edited_volume, edited_position,
                                                        edited_target, edited_difficulty)
                            if error:
                                st.error(error)
                            else:
                                st.session_state.keywords[idx] = Keyword(
                                    edited_text.strip(), int(edited_volume), edited_position,
                                    edited_target, int(edited_difficulty)
                                )
                                st.rerun()
                with col2:
                    if st.button("Remove", key=f"remove_kw_{idx}", type="primary", use_container_width=True):
                        st.session_state.keywords.pop(idx)
                        clear_keyword_widgets()
                        st.rerun()

# ----------------------------------
# 📈 Forecast
# ----------------------------------
with tab_forecast:
    st.header("Monthly Projections")
    c1, _ = st.columns([1, 5])
    if c1.button("Calculate Forecast", type="primary"):
        try:
            with st.spinner("Calculating..."):
                st.session_state.projections = forecast(st.session_state.keywords, settings, current_ctr_model())
            st.session_state.sweep_points = []
        except ValidationError as e:
            st.error(str(e))
        except MalformedKeywordError as e:
            logger.error("Forecast aborted: %s", e)
            st.error(GENERIC_FORECAST_ERROR)

    projections = st.session_state.projections
    if not projections:
        st.info("Set up your keywords and settings, then click **Calculate Forecast**.")
    else:
        proj_df = projections_to_frame(projections)
        disp = pd.DataFrame({
            "Month": proj_df["Month"],
            "Traffic (±10%)": [f"{p.traffic} ({p.traffic_range[0]} - {p.traffic_range[1]})" for p in projections],
            "Conversions (±10%)": [f"{p.conversions} ({p.conversions_range[0]} - {p.conversions_range[1]})"
                                   for p in projections],
            f"Revenue ({symbol}) (±10%)": [f"{p.revenue} ({p.revenue_range[0]:.2f} - {p.revenue_range[1]:.2f})"
                                            for p in projections],
            "ROI": [f"{p.roi}%" for p in projections],
        })
        st.dataframe(disp, use_container_width=True, hide_index=True)

        break_even = break_even_month(projections, settings.investment)
        st.success(f"**Break-Even Analysis:** You will recover your {symbol}{settings.investment:,.0f} "
                   f"investment by {break_even or 'N/A'}.")

        st.subheader("Traffic & Revenue Trends")
        trend_df = proj_df[["Month", "Traffic", "Revenue"]].melt("Month", var_name="Metric", value_name="Value")
        trend = alt.Chart(trend_df).mark_line(point=True).encode(
            x=alt.X('Month:N', sort=list(proj_df["Month"]), title='Month'),
            y=alt.Y('Value:Q', title='Value', scale=alt.Scale(zero=True)),
            color=alt.Color('Metric:N', legend=alt.Legend(title='Metric')),
            tooltip=[alt.Tooltip('Month:N'), alt.Tooltip('Metric:N'), alt.Tooltip('Value:Q', format=',.2f')]
        )
        band = alt.Chart(proj_df).mark_area(opacity=0.2).encode(
            x=alt.X('Month:N', sort=list(proj_df["Month"])), y='Traffic Low:Q', y2='Traffic High:Q'
        )
        st.altair_chart((band + trend).interactive(), use_container_width=True)

        st.subheader("Keyword Breakdown")
        month_labels = [p.month for p in projections]
        chosen = st.selectbox("Month", month_labels, key="breakdown_month")
        st.dataframe(breakdown_to_frame(projections[month_labels.index(chosen)]).style.format({
            "Traffic": "{:,.0f}", "Conversions": "{:,.0f}", "Revenue": "{:,.2f}"
        }), use_container_width=True, hide_index=True)

        st.markdown("---")
        st.subheader("Exports")
        left, right = st.columns(2)
        left.download_button(
            "⬇️ Download CSV",
            data=projections_to_csv(projections).encode('utf-8'),
            file_name="seo_projections.csv",
            mime="text/csv"
        )
        right.download_button(
            "🖨️ Print Forecast (HTML)",
            data=render_print_html(projections, settings, break_even).encode('utf-8'),
            file_name="seo_forecast.html",
            mime="text/html"
        )

# ----------------------------------
# 🧪 What-If
# ----------------------------------
with tab_whatif:
    st.header("What-If Analysis")
    if not st.session_state.projections:
        st.info("Calculate a forecast first to explore what-if scenarios.")
    else:
        variable = st.radio("Variable to Analyze", list(SWEEP_VARIABLES.keys()),
                            format_func=SWEEP_VARIABLES.get, horizontal=True, key="sweep_variable")
        default_start, default_end = default_sweep_range(settings, variable)
        c1, c2 = st.columns(2)
        range_start = c1.number_input("Range Start", value=float(default_start), key=f"sweep_start_{variable}")
        range_end = c2.number_input("Range End", value=float(default_end), key=f"sweep_end_{variable}")
        if st.button("Analyze"):
            try:
                st.session_state.sweep_points = sweep(
                    st.session_state.keywords, settings, current_ctr_model(), variable, range_start, range_end
                )
                st.session_state.sweep_label = SWEEP_VARIABLES[variable]
                if not st.session_state.sweep_points:
                    st.warning("Range End is below Range Start; no scenarios to show.")
            except ValidationError as e:
                st.error(str(e))
            except MalformedKeywordError as e:
                logger.error("What-if analysis aborted: %s", e)
                st.error(GENERIC_FORECAST_ERROR)

        if st.session_state.sweep_points:
            label = st.session_state.get("sweep_label", SWEEP_VARIABLES[variable])
            sweep_df = sweep_to_frame(st.session_state.sweep_points, label)
            st.dataframe(sweep_df.rename(columns={"Total Revenue": f"Total Revenue ({symbol})"}),
                         use_container_width=True, hide_index=True)
            chart_df = sweep_df.rename(columns={label: "Value"})
            line = alt.Chart(chart_df).mark_line(point=True).encode(
                x=alt.X('Value:Q', title=label),
                y=alt.Y('Total Revenue:Q', title=f'Total Revenue ({symbol})'),
                tooltip=[alt.Tooltip('Value:Q', title=label), alt.Tooltip('Total Traffic:Q', format=',.0f'),
                         alt.Tooltip('Total Conversions:Q', format=',.0f'),
                         alt.Tooltip('Total Revenue:Q', format=',.2f')]
            )
            st.altair_chart(line, use_container_width=True)
