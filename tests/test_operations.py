"""
Test cases for the edit operations: convert, offset, crop, concat and info.
"""
import pytest
from pathlib import Path
import sys

# Add src directory to path for testing
sys.path.insert( 0, str( Path( __file__ ).parent.parent / "src" ) );

from capshift.codecs import SrtCodec, VttCodec
from capshift.errors import EmptyInput, InvalidRange
from capshift.model import CaptionDocument, CaptionEntry
from capshift.operations import UNSPECIFIED_SPEAKER, concat, convert, crop, info, offset, tail_offset
from capshift.timestamp import CaptionFormat, Timestamp

SAMPLE_SRT = """1
00:00:01,000 --> 00:00:02,000
Hi

2
00:00:03,000 --> 00:00:04,500
Bye
""";


def entry( start, end, *text, speaker=None ):
    return CaptionEntry( Timestamp( start ), Timestamp( end ), speaker, text or ( "x", ) );


def document( *entries ):
    return CaptionDocument( entries=entries );


def spans( doc ):
    return [ ( e.start.milliseconds, e.end.milliseconds ) for e in doc ];


@pytest.fixture
def sample():
    return SrtCodec().parse( SAMPLE_SRT );


class TestConvert:
    """Format conversion leaves timing alone."""
    
    def test_srt_to_vtt( self, sample ):
        output = convert( sample, CaptionFormat.VTT );
        assert output == "WEBVTT\n\n00:00:01.000 --> 00:00:02.000\nHi\n\n00:00:03.000 --> 00:00:04.500\nBye\n";
    
    def test_vtt_back_to_srt( self, sample ):
        vtt = VttCodec().parse( convert( sample, "vtt" ) );
        assert convert( vtt, "srt" ) == SAMPLE_SRT;
    
    def test_codec_options_pass_through( self, sample ):
        assert convert( sample, "srt", first_index=5 ).startswith( "5\n" );


class TestOffset:
    """Uniform shifting with the clamp-at-zero policy."""
    
    def test_example_scenario( self, sample ):
        shifted = offset( sample, 1_000 );
        assert spans( shifted ) == [ ( 2_000, 3_000 ), ( 4_000, 5_500 ) ];
        assert [ e.text for e in shifted ] == [ ( "Hi", ), ( "Bye", ) ];
    
    def test_input_is_not_modified( self, sample ):
        before = spans( sample );
        offset( sample, 1_000 );
        assert spans( sample ) == before;
    
    def test_negative_offset( self, sample ):
        assert spans( offset( sample, -1_000 ) ) == [ ( 0, 1_000 ), ( 2_000, 3_500 ) ];
    
    def test_clamps_start_only( self, sample ):
        assert spans( offset( sample, -1_500 ) ) == [ ( 0, 500 ), ( 1_500, 3_000 ) ];
    
    def test_clamps_whole_entry_to_zero_length( self, sample ):
        assert spans( offset( sample, -2_500 ) ) == [ ( 0, 0 ), ( 500, 2_000 ) ];
    
    def test_inverse_law_without_clamping( self, sample ):
        assert offset( offset( sample, 2_345 ), -2_345 ) == sample;
        assert offset( offset( sample, -1_000 ), 1_000 ) == sample;
    
    def test_inverse_law_breaks_after_clamping( self, sample ):
        assert offset( offset( sample, -1_500 ), 1_500 ) != sample;
    
    def test_zero_offset( self, sample ):
        assert offset( sample, 0 ) == sample;
    
    def test_metadata_is_kept( self ):
        vtt = VttCodec().parse( "WEBVTT - Title\n\n00:00:01.000 --> 00:00:02.000\nHi\n" );
        assert offset( vtt, 10 ).header == ( "WEBVTT - Title", );
        assert offset( vtt, 10 ).source_format is CaptionFormat.VTT;


class TestCrop:
    """Window selection, clipping and re-basing."""
    
    def test_example_scenario( self, sample ):
        cropped = crop( sample, Timestamp.parse( "00:00:02,500", CaptionFormat.SRT ), Timestamp.parse( "00:00:10,000", CaptionFormat.SRT ) );
        assert spans( cropped ) == [ ( 500, 2_000 ) ];
        assert cropped.entries[0].text == ( "Bye", );
    
    def test_clips_both_ends( self ):
        doc = document( entry( 1_000, 9_000 ) );
        assert spans( crop( doc, 2_000, 5_000 ) ) == [ ( 0, 3_000 ) ];
    
    def test_entry_inside_window_is_rebased( self ):
        doc = document( entry( 3_000, 4_000 ) );
        assert spans( crop( doc, 1_000, 10_000 ) ) == [ ( 2_000, 3_000 ) ];
    
    def test_entry_ending_at_lower_bound_is_dropped( self ):
        doc = document( entry( 1_000, 2_000 ), entry( 2_000, 3_000 ) );
        assert spans( crop( doc, 2_000, 5_000 ) ) == [ ( 0, 1_000 ) ];
    
    def test_entry_starting_at_upper_bound_is_dropped( self ):
        doc = document( entry( 4_000, 5_000 ), entry( 5_000, 6_000 ) );
        assert spans( crop( doc, 0, 5_000 ) ) == [ ( 4_000, 5_000 ) ];
    
    def test_just_inside_bounds_is_kept( self ):
        doc = document( entry( 1_000, 2_001 ), entry( 4_999, 6_000 ) );
        assert spans( crop( doc, 2_000, 5_000 ) ) == [ ( 0, 1 ), ( 2_999, 3_000 ) ];
    
    def test_zero_length_entry_inside_window( self ):
        doc = document( entry( 3_000, 3_000 ) );
        assert spans( crop( doc, 2_000, 5_000 ) ) == [ ( 1_000, 1_000 ) ];
    
    def test_results_stay_inside_window( self, sample ):
        lower, upper = 1_500, 3_500;
        for e in crop( sample, lower, upper ):
            assert 0 <= e.start.milliseconds <= e.end.milliseconds <= upper - lower;
    
    def test_inverted_range( self, sample ):
        with pytest.raises( InvalidRange ):
            crop( sample, 5_000, 1_000 );
    
    def test_empty_range( self, sample ):
        with pytest.raises( InvalidRange ):
            crop( sample, Timestamp( 2_000 ), Timestamp( 2_000 ) );
    
    def test_window_with_no_entries( self, sample ):
        assert len( crop( sample, 10_000, 20_000 ) ) == 0;


class TestConcat:
    """Appending documents end to end."""
    
    def test_example_scenario( self ):
        doc_a = document( entry( 0, 4_000 ), entry( 6_000, 10_000 ) );
        doc_b = document( entry( 500, 1_500 ), entry( 2_000, 3_000 ) );
        joined = concat( [ doc_a, doc_b ] );
        assert len( joined ) == len( doc_a ) + len( doc_b );
        assert spans( joined )[2:] == [ ( 10_500, 11_500 ), ( 12_000, 13_000 ) ];
    
    def test_shifts_accumulate( self ):
        parts = [ document( entry( 0, 1_000 ) ), document( entry( 0, 2_000 ) ), document( entry( 100, 200 ) ) ];
        assert spans( concat( parts ) ) == [ ( 0, 1_000 ), ( 1_000, 3_000 ), ( 3_100, 3_200 ) ];
    
    def test_shift_uses_latest_end_not_last_entry( self ):
        first = document( entry( 0, 9_000 ), entry( 1_000, 2_000 ) );
        second = document( entry( 0, 1_000 ) );
        assert spans( concat( [ first, second ] ) )[-1] == ( 9_000, 10_000 );
    
    def test_result_is_sorted_by_start( self ):
        first = document( entry( 5_000, 6_000, "late" ), entry( 1_000, 2_000, "early" ) );
        second = document( entry( 0, 500, "next" ) );
        joined = concat( [ first, second ] );
        assert [ e.text[0] for e in joined ] == [ "early", "late", "next" ];
    
    def test_empty_document_in_the_middle( self ):
        parts = [ document( entry( 0, 1_000 ) ), document(), document( entry( 0, 500 ) ) ];
        assert spans( concat( parts ) ) == [ ( 0, 1_000 ), ( 1_000, 1_500 ) ];
    
    def test_single_document_unchanged( self ):
        only = document( entry( 5_000, 6_000 ), entry( 1_000, 2_000 ) );
        assert concat( [ only ] ) is only;
    
    def test_empty_input( self ):
        with pytest.raises( EmptyInput ):
            concat( [] );
    
    def test_header_from_first_document( self ):
        first = VttCodec().parse( "WEBVTT - One\n\n00:00:01.000 --> 00:00:02.000\nA\n" );
        second = VttCodec().parse( "WEBVTT - Two\n\n00:00:01.000 --> 00:00:02.000\nB\n" );
        assert concat( [ first, second ] ).header == ( "WEBVTT - One", );
    
    def test_inputs_untouched( self ):
        first = document( entry( 0, 1_000 ) );
        second = document( entry( 0, 1_000 ) );
        concat( [ first, second ] );
        assert spans( second ) == [ ( 0, 1_000 ) ];
    
    def test_tail_offset( self, sample ):
        assert tail_offset( sample ) == 4_500;
        assert tail_offset( document() ) == 0;


class TestInfo:
    """Duration, entry count and talk time."""
    
    def test_empty_document( self ):
        report = info( document() );
        assert report.duration == Timestamp( 0 );
        assert report.entry_count == 0;
        assert report.talk_time == {};
    
    def test_sample( self, sample ):
        report = info( sample );
        assert report.duration == Timestamp( 4_500 );
        assert report.entry_count == 2;
        assert report.talk_time == { UNSPECIFIED_SPEAKER: 2_500 };
    
    def test_per_speaker_totals( self ):
        doc = document(
            entry( 0, 1_000, speaker="ALICE" ),
            entry( 1_000, 4_000, speaker="BOB" ),
            entry( 4_000, 4_500, speaker="ALICE" ),
            entry( 5_000, 5_250 )
        );
        report = info( doc );
        assert report.talk_time == { "ALICE": 1_500, "BOB": 3_000, UNSPECIFIED_SPEAKER: 250 };
        assert report.speakers_by_talk_time()[0] == ( "BOB", 3_000 );
    
    def test_overlaps_are_double_counted( self ):
        doc = document( entry( 0, 2_000, speaker="ALICE" ), entry( 1_000, 3_000, speaker="ALICE" ) );
        assert info( doc ).talk_time == { "ALICE": 4_000 };
    
    def test_duration_is_latest_end( self ):
        doc = document( entry( 0, 9_000 ), entry( 1_000, 2_000 ) );
        assert info( doc ).duration == Timestamp( 9_000 );
    
    def test_speakers_from_parsed_file( self ):
        doc = SrtCodec().parse( "1\n00:00:00,000 --> 00:00:02,000\nALICE: Hi\n\n2\n00:00:02,000 --> 00:00:03,000\nBOB: Hey\n" );
        assert info( doc ).talk_time == { "ALICE": 2_000, "BOB": 1_000 };


if __name__ == '__main__':
    pytest.main( [ __file__ ] );
