"""
app.py: Streamlit dashboard for Boondh (rainwater harvesting estimate)

Audience
--------
Homeowners and the people helping them. Every step is labelled with units.

What this app does (end-to-end)
-------------------------------
1) Sidebar inputs: city, rooftop (area or length x width),
   roof material, optional quoted setup cost, live weather toggle, optional
   daily rainfall CSV.
2) Resolve the location and estimate monthly rainfall (live Open-Meteo data,
   or typical seasonal rainfall when that fails).
3) Compute collection, savings, setup cost, incentives, payback and ROI.
4) Show results, a monthly collection chart, a material comparison, the
   7-day forecast with rain alerts, and CSV / PDF downloads.

Design
------
- Units: inches (monthly rain), mm (daily rain), sq ft (roof), litres (water).
- Streamlit reruns on button clicks, so we store results in st.session_state
  to support "secondary actions" (PDF export) after the main run.
"""

from __future__ import annotations

import logging
import traceback

import pandas as pd
import streamlit as st

from boondh_core.config import RooftopSpec, RoofMaterial, build_config
from boondh_core.hydro import monthly_profile, usage_breakdown
from boondh_core.finance import cashflow_table
from boondh_core.io import geocode_city
from boondh_core.scenarios import build_material_table, estimate_rows, run_estimate
from boondh_core.version import __version__
from boondh_core.weather import CsvPrecipitationSource, OpenMeteoSource

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


# ------------------------------------------------------------
# Page & Sidebar: user inputs
# ------------------------------------------------------------
st.set_page_config(page_title="Boondh | Rainwater Harvesting", layout="wide")

st.sidebar.title("Boondh")
st.sidebar.caption(f"Version {__version__}")

city = st.sidebar.text_input(
    "City",
    value="Delhi",
    help="Example: 'Mumbai' or 'Pune'. Unknown cities fall back to Delhi unless online geocoding is on.",
)

use_geocoder = st.sidebar.checkbox(
    "Look up unknown cities online (OpenStreetMap)",
    value=False,
    key="geocode_checkbox",
)

area_mode = st.sidebar.radio(
    "Rooftop input",
    options=["Total area", "Length x width"],
    index=0,
    key="area_mode_radio",
    help="Whichever you choose is the one used for the calculation.",
)

if area_mode == "Total area":
    area_sqft = st.sidebar.number_input(
        "Rooftop area (sq ft)",
        min_value=0.0,
        value=1000.0,
        step=50.0,
        key="area_input",
    )
    length_ft = width_ft = None
else:
    length_ft = st.sidebar.number_input("Length (ft)", min_value=0.0, value=40.0, step=1.0, key="length_input")
    width_ft = st.sidebar.number_input("Width (ft)", min_value=0.0, value=25.0, step=1.0, key="width_input")
    area_sqft = None

material = st.sidebar.selectbox(
    "Roof material",
    options=[m.value for m in RoofMaterial],
    index=[m.value for m in RoofMaterial].index("concrete"),
    key="material_select",
)

setup_quote = st.sidebar.number_input(
    "Quoted setup cost (0 = estimate from area)",
    min_value=0.0,
    value=0.0,
    step=1000.0,
    key="setup_cost_input",
)

use_live = st.sidebar.checkbox("Use live weather (Open-Meteo)", value=True, key="live_checkbox")

rain_file = st.sidebar.file_uploader(
    "Upload daily rainfall CSV (date, precipitation_mm)",
    type=["csv"],
    help="Your own rain-gauge readings, used instead of Open-Meteo for the monthly estimate (last 30 days).",
    key="rain_uploader",
)

run_btn = st.sidebar.button("Calculate", key="run_button")

st.title("Boondh: how much rain can your roof collect?")
st.write(
    "Estimates are indicative. Monthly rainfall comes from the last 30 days of "
    "weather data, or from typical seasonal rainfall when live data is unavailable."
)


# ------------------------------------------------------------
# Main action
# ------------------------------------------------------------
def run_once():
    """
    Build a config, run the estimate, render results, keep them for the PDF.
    """
    if area_mode == "Total area":
        rooftop = RooftopSpec.direct(area_sqft, material)
    else:
        rooftop = RooftopSpec.from_dimensions(length_ft, width_ft, material)

    # Uploaded rainfall replaces Open-Meteo for the monthly estimate only
    rain_series = None
    if rain_file is not None:
        try:
            from boondh_core.rainfall import parse_precipitation_csv

            rain_series = parse_precipitation_csv(rain_file)
            st.info(f"Rainfall CSV parsed: {len(rain_series)} days, total {rain_series.sum():.1f} mm")
        except Exception as e:
            st.error(f"Failed to parse rainfall CSV: {e}")
            return

    cfg = build_config(
        city=city,
        rooftop=rooftop,
        setup_cost_override=setup_quote if setup_quote > 0 else None,
        use_live_weather=use_live or rain_series is not None,
    )
    source = OpenMeteoSource(base_url=cfg.weather_url, cache_dir=cfg.cache_folder)
    if rain_series is not None:
        source = CsvPrecipitationSource(rain_series, forecast_source=source if use_live else None)

    with st.spinner("Fetching weather and computing..."):
        est = run_estimate(cfg, source=source, geocoder=geocode_city if use_geocoder else None)

    if est.location_source == "default":
        st.warning(f"City '{city}' not recognised; using {est.location.name}.")
    if est.rainfall.source == "fallback":
        st.info("Live weather unavailable; using typical seasonal rainfall for this month.")

    y, f = est.yield_result, est.financials

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Monthly collection", f"{y.monthly_collection_l:,.0f} L")
    c2.metric("Annual collection", f"{y.annual_collection_l / 1000:,.1f}K L")
    c3.metric("Annual savings", f"₹{y.annual_savings:,.0f}")
    c4.metric("Payback", f"{f.payback_period_years:,.1f} yrs")

    st.caption(
        f"{est.location.name} ({est.location.latitude:.2f}, {est.location.longitude:.2f}) | "
        f"Climate zone: {est.climate_zone.value} | "
        f"Rainfall: {est.rainfall.monthly_inches:.2f} in/month ({est.rainfall.annual_inches:.1f} in/year) | "
        f"Rating: {est.rating}"
    )

    r = est.recency
    weather_bits = [
        f"Last rain: {r.last_rain_days_ago} days ago" if r.last_rain_days_ago is not None else "Last rain: unknown",
        f"Next rain: in {r.next_rain_in_days} days" if r.next_rain_in_days is not None else "Next rain: none forecast",
    ]
    temp_now = est.current.get("temperature_2m")
    if temp_now is not None:
        weather_bits.append(f"Now: {temp_now} °C")
    st.caption(" | ".join(weather_bits))

    # --- Monthly collection chart ---
    import matplotlib.pyplot as plt

    st.subheader("Monthly collection (litres)")
    profile = monthly_profile(y)
    fig, ax = plt.subplots(figsize=(7, 3.5))
    ax.bar(profile["month"], profile["liters"], color="#3b82f6")
    ax.set_ylabel("Litres")
    ax.set_title("Seasonal collection (monsoon June–September)")
    ax.grid(True, axis="y", linestyle="--", alpha=0.4)
    st.pyplot(fig)

    # --- Usage split ---
    st.subheader("What that water covers each month")
    usage = usage_breakdown(y.monthly_collection_l)
    st.dataframe(pd.DataFrame(usage).T)

    # --- Money ---
    st.subheader("Costs and returns")
    st.dataframe(
        pd.DataFrame(
            {
                "item": [
                    "Setup cost",
                    "Government incentives",
                    "Subsidy",
                    "Tax benefits",
                    "Net setup cost",
                    "Annual maintenance",
                    "Net annual savings",
                    "ROI (%)",
                ],
                "value": [
                    f.setup_cost,
                    f.government_incentives,
                    f.subsidy_amount,
                    f.tax_benefits,
                    f.net_setup_cost,
                    f.annual_maintenance_cost,
                    f.net_annual_savings,
                    f.roi_percent,
                ],
            }
        )
    )
    st.line_chart(cashflow_table(f, years=10).set_index("year")["balance"])

    # --- Materials ---
    st.subheader("Compare roof materials")
    st.dataframe(build_material_table(est.rainfall, cfg.rooftop, cfg.setup_cost_override, cfg.rates))

    # --- Forecast and alerts ---
    st.subheader("7-day forecast")
    if est.forecast:
        st.dataframe(pd.DataFrame([vars(d) for d in est.forecast]))
        for alert in est.alerts:
            st.success(f"{alert.title}: {alert.message}")
    else:
        st.info("Weather forecast is being updated. Please check back soon!")

    # --- CSV export ---
    csv_bytes = pd.DataFrame(estimate_rows(est)).to_csv(index=False).encode("utf-8")
    st.download_button(
        label="Download estimate as CSV",
        data=csv_bytes,
        file_name="boondh_estimate.csv",
        mime="text/csv",
    )

    st.session_state["last_results"] = {"cfg": cfg, "estimate": est, "fig": fig}


if run_btn:
    try:
        run_once()
    except Exception as exc:
        st.error(f"An error occurred: {exc}")
        st.code("".join(traceback.format_exc()), language="text")
else:
    st.info("Set your city and rooftop in the sidebar and click Calculate.")


# ------------------------------------------------------------
# PDF section (outside run_once), safe across reruns
# ------------------------------------------------------------
st.subheader("PDF report")
if "last_results" in st.session_state:
    from boondh_core.report import generate_pdf_report

    cfg = st.session_state["last_results"]["cfg"]
    est = st.session_state["last_results"]["estimate"]
    fig = st.session_state["last_results"]["fig"]

    pdf_path = cfg.reports_folder / "boondh_report.pdf"

    if st.button("Generate PDF"):
        try:
            out_file = generate_pdf_report(est, out_path=pdf_path, fig=fig)
            with open(out_file, "rb") as fh:
                st.download_button(
                    label="Download PDF report",
                    data=fh.read(),
                    file_name="boondh_report.pdf",
                    mime="application/pdf",
                )
            st.success(f"Report created: {out_file}")
        except Exception as e:
            st.error(f"PDF generation failed: {e}")
else:
    st.caption("Run a calculation first to enable the PDF report.")
