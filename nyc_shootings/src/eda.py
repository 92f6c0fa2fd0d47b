# src/eda.py
import plotly.express as px


def plot_region_totals(totals):
    fig = px.bar(totals, x='Borough', y='Incidents', text='Incidents',
                 title='Shooting incidents by borough')
    return fig


def plot_per_capita(per_capita):
    fig = px.bar(per_capita, x='Borough', y='Rate per 100k', text_auto='.1f',
                 title='Shooting incidents per 100,000 residents')
    return fig


def plot_population_shares(shares):
    df = shares.copy()
    df['Year'] = df['Year'].astype(str)
    fig = px.bar(df, x='Borough', y='Share', color='Year', barmode='group',
                 title='Population share by census year (%)')
    return fig


def plot_observed_vs_expected(comparison):
    # long format for plotly
    df = comparison.melt(id_vars='Borough', value_vars=['Observed', 'Expected'],
                         var_name='Series', value_name='Incidents')
    fig = px.bar(df, x='Borough', y='Incidents', color='Series', barmode='group',
                 title='Observed vs expected incidents')
    return fig


def plot_period_counts(periods):
    fig = px.bar(periods, x='Period', y='Incidents', color='Borough',
                 title='Incidents by period and borough')
    return fig


def plot_demographic(counts, column):
    df = counts.copy()
    df[column] = df[column].astype(str)
    fig = px.bar(df, x=column, y='Incidents', title=f'Incidents by {column.lower()}')
    fig.update_layout(xaxis_tickangle=-45)
    return fig
