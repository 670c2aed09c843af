"""Sample repository ontology shared by the test suite."""

from rdflib import Graph, Namespace

EX = Namespace("https://example.org/schema#")
OTHER = Namespace("https://other.org/")
LIC = Namespace("https://vocabs.example.org/licenses/")
LICENSES = "https://vocabs.example.org/licenses"
ONTOLOGY_NAMESPACE = str(EX)

# Repository ontology: RepoObject <- Collection <- TopCollection, RepoObject <- Resource,
# Agent <- Person (= other:Human), two restrictions, one controlled vocabulary.
SAMPLE_ONTOLOGY = """
@prefix ex: <https://example.org/schema#> .
@prefix other: <https://other.org/> .
@prefix lic: <https://vocabs.example.org/licenses/> .
@prefix owl: <http://www.w3.org/2002/07/owl#> .
@prefix rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
@prefix skos: <http://www.w3.org/2004/02/skos/core#> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .

ex:RepoObject a owl:Class ;
    rdfs:label "Repository object"@en, "Repositoriumsobjekt"@de ;
    rdfs:comment "Anything stored in the repository"@en .

ex:Collection a owl:Class ;
    rdfs:subClassOf ex:RepoObject ;
    rdfs:subClassOf [
        a owl:Restriction ;
        owl:onProperty ex:hasDepositor ;
        owl:minCardinality "1"^^xsd:nonNegativeInteger
    ] ;
    rdfs:label "Collection"@en .

ex:TopCollection a owl:Class ;
    rdfs:subClassOf ex:Collection ;
    rdfs:subClassOf [
        a owl:Restriction ;
        owl:onProperty ex:hasDepositor ;
        owl:minQualifiedCardinality "2"^^xsd:nonNegativeInteger ;
        owl:maxQualifiedCardinality "5"^^xsd:nonNegativeInteger ;
        owl:onClass ex:Person
    ] ;
    rdfs:label "Top collection"@en .

ex:Resource a owl:Class ;
    rdfs:subClassOf ex:RepoObject ;
    rdfs:label "Resource"@en .

ex:Agent a owl:Class ;
    rdfs:label "Agent"@en .

ex:Person a owl:Class ;
    rdfs:subClassOf ex:Agent ;
    rdfs:label "Person"@en .

other:Human a owl:Class ;
    owl:equivalentClass ex:Person .

ex:hasDepositor a owl:ObjectProperty ;
    rdfs:domain ex:RepoObject ;
    rdfs:range ex:Agent ;
    rdfs:label "Depositor"@en ;
    ex:ordering "20" .

ex:hasTitle a owl:DatatypeProperty ;
    rdfs:domain ex:RepoObject ;
    rdfs:range rdf:langString ;
    rdfs:label "Title"@en, "Titel"@de ;
    ex:ordering "10" ;
    ex:recommendedClass ex:Collection ;
    ex:exampleValue "An example title"@en, "Ein Beispieltitel"@de .

ex:hasAlternativeTitle a owl:DatatypeProperty ;
    rdfs:subPropertyOf ex:hasTitle ;
    rdfs:domain ex:Collection ;
    rdfs:range xsd:string ;
    ex:langTag "true" ;
    ex:ordering "11" .

ex:hasIdentifier a owl:DatatypeProperty ;
    rdfs:domain ex:RepoObject ;
    rdfs:range xsd:anyURI ;
    ex:automatedFill "true"^^xsd:boolean ;
    ex:defaultValue "n/a" .

other:identifier a owl:DatatypeProperty ;
    owl:equivalentProperty ex:hasIdentifier .

ex:hasName a owl:DatatypeProperty ;
    rdfs:domain ex:Agent ;
    rdfs:range xsd:string .

ex:hasLicense a owl:ObjectProperty ;
    rdfs:domain ex:Resource ;
    rdfs:range skos:Concept ;
    ex:vocabs <https://vocabs.example.org/licenses> ;
    ex:ordering "30" .

<https://vocabs.example.org/licenses> a skos:ConceptScheme .
<https://vocabs.example.org/other> a skos:ConceptScheme .

lic:cc-by a skos:Concept ;
    skos:inScheme <https://vocabs.example.org/licenses> ;
    skos:notation "CC-BY-4.0" ;
    skos:prefLabel "Attribution"@en, "Namensnennung"@de ;
    skos:altLabel "CC BY 4.0"@en ;
    skos:narrower lic:cc-by-sa .

lic:cc-by-sa a skos:Concept ;
    skos:inScheme <https://vocabs.example.org/licenses> ;
    skos:notation "CC-BY-SA-4.0" ;
    skos:prefLabel "Attribution ShareAlike"@en ;
    skos:broader lic:cc-by, <https://vocabs.example.org/other/share-alike> .

lic:public-domain a skos:Concept ;
    skos:inScheme <https://vocabs.example.org/licenses> ;
    skos:prefLabel "Public Domain"@en ;
    skos:altLabel "PD"@en .

lic:cc0 a skos:Concept ;
    skos:inScheme <https://vocabs.example.org/licenses> ;
    skos:notation "CC0-1.0" ;
    skos:prefLabel "Public Domain"@en .

<https://vocabs.example.org/other/share-alike> a skos:Concept ;
    skos:inScheme <https://vocabs.example.org/other> ;
    skos:prefLabel "Share alike"@en .
"""

PREFIXES = """
@prefix ex: <https://example.org/schema#> .
@prefix owl: <http://www.w3.org/2002/07/owl#> .
@prefix rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
@prefix skos: <http://www.w3.org/2004/02/skos/core#> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .
"""


def parse_turtle(body: str) -> Graph:
    """Parse a Turtle snippet using the `ex:`, OWL, RDF(S), SKOS and XSD prefixes."""
    graph = Graph()
    graph.parse(data=PREFIXES + body, format="turtle")
    return graph


def sample_graph() -> Graph:
    """The sample repository ontology as a fresh graph."""
    graph = Graph()
    graph.parse(data=SAMPLE_ONTOLOGY, format="turtle")
    return graph
