"""
Mock workflow generator for Butterflow.

Produces a workflow from a project description by keyword lookup against a
fixed set of templates. There is no language understanding involved: the
first template whose keyword occurs in the lowercased text wins.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple
import logging

from .models import Workflow


RESPONSE_TEXT = "I've created a workflow based on your request. You can see it visualized on the right."


WEATHER_TEMPLATE: Dict[str, Any] = {
    'version': '1.0',
    'name': 'Weather App',
    'description': 'A React app that fetches and displays weather data',
    'nodes': [
        {
            'id': 'setup',
            'name': 'Project Setup',
            'type': 'automatic',
            'description': 'Scaffold the React project and install dependencies',
            'file_path': 'package.json',
            'code_snippet': '{\n  "name": "weather-app",\n  "dependencies": {\n    "react": "^18.2.0",\n    "axios": "^1.6.0"\n  }\n}',
        },
        {
            'id': 'weather_api',
            'name': 'Weather API Service',
            'type': 'automatic',
            'depends_on': ['setup'],
            'description': 'Fetch current conditions from the weather provider',
            'code_snippet': (
                "import axios from 'axios';\n\n"
                "export async function fetchWeather(city) {\n"
                "  const { data } = await axios.get(`/api/weather?q=${city}`);\n"
                "  return data;\n"
                "}"
            ),
        },
        {
            'id': 'weather_model',
            'name': 'Weather Model',
            'type': 'automatic',
            'depends_on': ['setup'],
            'description': 'Normalize provider payloads into a display model',
            'code_snippet': (
                "export function toWeather(payload) {\n"
                "  return { temp: payload.main.temp, summary: payload.weather[0].main };\n"
                "}"
            ),
        },
        {
            'id': 'weather_ui',
            'name': 'Weather Display Component',
            'type': 'automatic',
            'depends_on': ['weather_api', 'weather_model'],
            'description': 'Render temperature, conditions and details',
            'code_snippet': (
                "export default function WeatherDisplay({ weather }) {\n"
                "  return <div className=\"weather\">{weather.temp}°F {weather.summary}</div>;\n"
                "}"
            ),
        },
        {
            'id': 'review',
            'name': 'Review and Deploy',
            'type': 'manual',
            'depends_on': ['weather_ui'],
            'description': 'Check the UI and publish the build',
        },
    ],
}


PORTFOLIO_TEMPLATE: Dict[str, Any] = {
    'version': '1.0',
    'name': 'Portfolio Site',
    'description': 'A personal portfolio with projects and contact form',
    'nodes': [
        {
            'id': 'layout',
            'name': 'Layout Component',
            'type': 'automatic',
            'description': 'Header, navigation and footer shared by every page',
            'code_snippet': (
                "export default function Layout({ children }) {\n"
                "  return <><header /><main>{children}</main><footer /></>;\n"
                "}"
            ),
        },
        {
            'id': 'projects_model',
            'name': 'Project Schema',
            'type': 'automatic',
            'description': 'Shape of a portfolio project entry',
            'code_snippet': "export const project = { title: '', summary: '', url: '' };",
        },
        {
            'id': 'hero',
            'name': 'Hero UI',
            'type': 'automatic',
            'depends_on': ['layout'],
            'description': 'Landing section with name and tagline',
            'code_snippet': "export const Hero = () => <section><h1>John Developer</h1></section>;",
        },
        {
            'id': 'projects',
            'name': 'Projects Component',
            'type': 'automatic',
            'depends_on': ['layout', 'projects_model'],
            'description': 'Grid of project cards',
            'code_snippet': "export const Projects = ({ items }) => items.map(p => <article key={p.url}>{p.title}</article>);",
        },
        {
            'id': 'contact',
            'name': 'Contact Route',
            'type': 'automatic',
            'depends_on': ['layout'],
            'description': 'Form posting messages to the contact endpoint',
            'code_snippet': "router.post('/contact', (req, res) => res.status(202).end());",
        },
        {
            'id': 'publish',
            'name': 'Publish Site',
            'type': 'manual',
            'depends_on': ['hero', 'projects', 'contact'],
            'description': 'Build and deploy the static site',
        },
    ],
}


API_TEMPLATE: Dict[str, Any] = {
    'version': '1.0',
    'name': 'REST API',
    'description': 'An Express API with users and authentication',
    'nodes': [
        {
            'id': 'server',
            'name': 'Server Setup',
            'type': 'automatic',
            'description': 'Express application and middleware',
            'file_path': 'server.js',
            'code_snippet': "const app = require('express')();\napp.use(require('express').json());\nmodule.exports = app;",
        },
        {
            'id': 'user_model',
            'name': 'User Model',
            'type': 'automatic',
            'depends_on': ['server'],
            'description': 'User schema and persistence helpers',
            'code_snippet': "const userSchema = { id: String, name: String, email: String, role: String };",
        },
        {
            'id': 'auth',
            'name': 'Auth Service',
            'type': 'automatic',
            'depends_on': ['user_model'],
            'description': 'Token issuing and role checks',
            'code_snippet': (
                "function authorize(...roles) {\n"
                "  return (req, res, next) => roles.includes(req.user.role) ? next() : res.sendStatus(403);\n"
                "}"
            ),
        },
        {
            'id': 'user_controller',
            'name': 'User Controller',
            'type': 'automatic',
            'depends_on': ['user_model', 'auth'],
            'description': 'CRUD handlers for users',
            'code_snippet': "exports.list = async (req, res) => res.json({ users: await User.find() });",
        },
        {
            'id': 'routes',
            'name': 'User Routes',
            'type': 'automatic',
            'depends_on': ['user_controller'],
            'description': 'Mount the user endpoints under /api/users',
            'code_snippet': "router.get('/api/users', authorize('admin'), controller.list);",
        },
        {
            'id': 'smoke_test',
            'name': 'Smoke Test',
            'type': 'manual',
            'depends_on': ['routes'],
            'description': 'Call every endpoint once against a local server',
        },
    ],
}


DEFAULT_TEMPLATE: Dict[str, Any] = {
    'version': '1.0',
    'name': 'Generic Workflow',
    'description': 'A start-to-end workflow with a decision branch',
    'nodes': [
        {'id': 'start', 'name': 'Start Node', 'type': 'automatic'},
        {'id': 'process', 'name': 'Process Data', 'type': 'automatic', 'depends_on': ['start']},
        {'id': 'decision', 'name': 'Make Decision', 'type': 'manual', 'depends_on': ['process']},
        {'id': 'success', 'name': 'Success Path', 'type': 'automatic', 'depends_on': ['decision']},
        {'id': 'failure', 'name': 'Failure Path', 'type': 'automatic', 'depends_on': ['decision']},
        {'id': 'end', 'name': 'End Node', 'type': 'automatic', 'depends_on': ['success', 'failure']},
    ],
}


# Checked in order; the first keyword found in the prompt selects the template.
TEMPLATES: List[Tuple[Tuple[str, ...], str, Dict[str, Any]]] = [
    (('weather', 'forecast'), 'weather', WEATHER_TEMPLATE),
    (('portfolio', 'personal site', 'resume'), 'portfolio', PORTFOLIO_TEMPLATE),
    (('api', 'backend', 'rest', 'server'), 'api', API_TEMPLATE),
]


@dataclass(frozen=True)
class GeneratedWorkflow:
    """
    Result of a mock generation: the reply text and the workflow.
    """
    template: str
    message: str
    workflow: Workflow


class WorkflowGenerator:
    """
    Keyword-template workflow generator.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def match_template(self, prompt: str) -> Tuple[str, Dict[str, Any]]:
        """
        Pick the template for a prompt.

        Args:
            prompt: User's project description

        Returns:
            Tuple of (template name, template dictionary)
        """
        text = prompt.lower()
        for keywords, name, template in TEMPLATES:
            if any(keyword in text for keyword in keywords):
                return name, template
        return 'default', DEFAULT_TEMPLATE

    def generate(self, prompt: str) -> GeneratedWorkflow:
        """
        Generate a workflow for a project description.

        Args:
            prompt: User's project description

        Returns:
            GeneratedWorkflow with the reply text and the workflow
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt must not be empty")

        name, template = self.match_template(prompt)
        self.logger.info(f"Generating '{name}' workflow for prompt: {prompt[:60]}")
        return GeneratedWorkflow(
            template=name,
            message=RESPONSE_TEXT,
            workflow=Workflow.from_dict(template),
        )


def generate_workflow(prompt: str) -> GeneratedWorkflow:
    """Generate a workflow with a default generator."""
    return WorkflowGenerator().generate(prompt)
